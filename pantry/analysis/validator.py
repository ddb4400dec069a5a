"""Structural and taxonomy checks for extracted line items."""

from __future__ import annotations

import logging
import math
from dataclasses import fields

from .models import RawLineItem, ValidatedLineItem

logger = logging.getLogger(__name__)

# "Household" and "Personal Care" are valid extractor output but never food.
ACCEPTED_CATEGORIES: frozenset[str] = frozenset({
    "Produce",
    "Dairy",
    "Meat",
    "Seafood",
    "Bakery",
    "Pantry",
    "Frozen",
    "Beverages",
    "Snacks",
    "Other",
})


def _non_empty_str(value) -> bool:
    return isinstance(value, str) and bool(value.strip())


def _finite_number(value) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    try:
        return math.isfinite(value)
    except OverflowError:
        # int too large for a float
        return False


def _optional_price(value) -> bool:
    return value is None or _finite_number(value)


class FoodCategoryValidator:
    """Drop line items that are incomplete or outside the food taxonomy.

    Items are filtered, never corrected, so validating an already validated
    list returns it unchanged.
    """

    def __init__(self, accepted_categories: frozenset[str] = ACCEPTED_CATEGORIES) -> None:
        self._accepted = accepted_categories

    def is_valid(self, item: RawLineItem) -> bool:
        return (
            _non_empty_str(item.name)
            and _finite_number(item.quantity)
            and _non_empty_str(item.unit)
            and _optional_price(item.price)
            and item.category in self._accepted
        )

    def validate(self, items: list[RawLineItem]) -> list[ValidatedLineItem]:
        validated: list[ValidatedLineItem] = []
        for item in items:
            if not self.is_valid(item):
                logger.debug("Dropping line item %r", item)
                continue
            if isinstance(item, ValidatedLineItem):
                validated.append(item)
            else:
                validated.append(
                    ValidatedLineItem(**{f.name: getattr(item, f.name) for f in fields(item)})
                )

        dropped = len(items) - len(validated)
        if dropped:
            logger.info("Validation dropped %d of %d items", dropped, len(items))
        return validated
