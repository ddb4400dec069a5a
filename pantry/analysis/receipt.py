"""Receipt line-item extraction strategies."""

from __future__ import annotations

import json
import logging
import re
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from ..errors import ExtractionError
from .models import RawLineItem

if TYPE_CHECKING:
    from ..config import PantryConfig
    from ..llm import TextGenerator

logger = logging.getLogger(__name__)

_PROMPT = """\
Extract ONLY FOOD AND GROCERY items from this receipt text. Ignore all non-food items completely.

Return ONLY a JSON array of objects with this exact structure:
[
  {
    "name": "item name",
    "quantity": number,
    "unit": "item" | "kg" | "g" | "lbs" | "oz" | "L" | "mL",
    "price": number,
    "category": "Produce" | "Dairy" | "Meat" | "Seafood" | "Bakery" | "Pantry" | "Frozen" | "Beverages" | "Snacks" | "Household" | "Personal Care" | "Other"
  }
]

FOOD ITEMS TO INCLUDE:
- Fresh fruits and vegetables (apples, bananas, lettuce, tomatoes, etc.)
- Dairy products (milk, cheese, yogurt, butter, eggs)
- Meat and poultry (chicken, beef, pork, turkey)
- Seafood (fish, shrimp, salmon)
- Bakery items (bread, bagels, muffins, pastries)
- Pantry staples (pasta, rice, flour, sugar, oil, spices)
- Canned goods (canned beans, tomatoes, soup)
- Frozen foods (frozen vegetables, meals, ice cream)
- Beverages (juice, soda, water, coffee, tea)
- Snacks (chips, crackers, nuts, granola bars)
- Condiments and sauces (ketchup, mustard, salad dressing)
- Breakfast foods (cereal, oatmeal, pancake mix)

NON-FOOD ITEMS TO EXCLUDE:
- Electronics (batteries, chargers, cables, light bulbs)
- Household supplies (paper towels, toilet paper, cleaning products, detergent)
- Personal care (shampoo, soap, toothpaste, deodorant, cosmetics)
- Health and beauty (vitamins, medicine, first aid)
- Pet supplies (pet food, toys, litter)
- Office supplies (pens, paper, folders)
- Automotive (motor oil, windshield fluid)
- Garden supplies (fertilizer, tools)
- Clothing and accessories
- Gift cards, lottery tickets
- Services (deli, bakery orders)
- Taxes, fees, bag charges

Rules:
- Be VERY STRICT about only including food items
- Handle weight-based items (e.g., "0.5 lbs apples" -> quantity: 0.5, unit: "lbs")
- Parse quantity from item names (e.g., "2 Dozen Eggs" -> quantity: 24, unit: "item")
- Handle bulk items (e.g., "Bananas @ $0.59/lb" with weight "1.2 lbs" -> quantity: 1.2, unit: "lbs")
- Use the category list above
- If quantity not specified, default to 1
- If unit not specified, use "item"
- If no price found, set to null
- Clean item names (remove brand names unless essential for identification)
- If NO food items found, return an empty array []

Receipt Text:
{receipt_text}

JSON Response:"""


def build_prompt(text: str) -> str:
    return _PROMPT.replace("{receipt_text}", text)


def find_json_array(text: str) -> str | None:
    """Return the first bracket-matched ``[...]`` substring of *text*.

    Brackets inside JSON string literals are ignored.
    """
    start = text.find("[")
    if start == -1:
        return None

    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch == "[":
            depth += 1
        elif ch == "]":
            depth -= 1
            if depth == 0:
                return text[start : i + 1]
    return None


def _reject_constant(name: str):
    raise ValueError(f"Non-finite number in JSON: {name}")


def parse_line_items(text: str) -> list[RawLineItem] | None:
    """Parse the JSON array embedded in a model response.

    Returns None when no array is present or it doesn't parse as strict JSON
    (NaN and Infinity are rejected). Entries that are not JSON objects are
    skipped.
    """
    fragment = find_json_array(text)
    if fragment is None:
        logger.warning("No JSON array found in extraction response")
        return None

    try:
        data = json.loads(fragment, parse_constant=_reject_constant)
    except ValueError:
        logger.warning("JSON parse error: invalid extraction response format")
        return None

    if not isinstance(data, list):
        return None
    return [RawLineItem.from_dict(entry) for entry in data if isinstance(entry, dict)]


class LineItemExtractor(ABC):
    """Abstract base for turning receipt text into raw line items."""

    mode: str = ""

    @abstractmethod
    async def extract(self, text: str) -> list[RawLineItem] | None:
        """Extract line items; None means extraction failed."""
        ...


class DelegatedLineItemExtractor(LineItemExtractor):
    """Extract line items by asking a language model for a JSON array."""

    mode = "llm"

    def __init__(self, generator: TextGenerator) -> None:
        self._generator = generator

    async def extract(self, text: str) -> list[RawLineItem] | None:
        if not text or not text.strip():
            logger.info("No text provided for LLM processing")
            return None

        try:
            response = await self._generator.generate(build_prompt(text))
        except Exception as exc:
            raise ExtractionError(f"Text generation failed: {exc}") from exc

        items = parse_line_items(response)
        if items is not None:
            logger.info("LLM returned %d candidate items", len(items))
        return items


# Lines that never describe a purchased item
_SKIP_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"^(subtotal|total|tax|change|cash|credit|debit)", re.IGNORECASE),
    re.compile(r"^\$?\d+\.\d{2}$"),
    re.compile(r"^thank you", re.IGNORECASE),
    re.compile(r"^store #", re.IGNORECASE),
    re.compile(r"^\d+/\d+/\d+"),
    re.compile(r"^\d+:\d+"),
)

# "[QTY ]ITEM NAME $X.XX"
_ITEM_PATTERN = re.compile(r"^(\d+\s+)?(.+?)\s+\$?(\d+\.\d{2})$")

_NUMERIC_NAME = re.compile(r"^\d+$")

# Checked in order; labels belong to the accepted food taxonomy.
_CATEGORY_RULES: tuple[tuple[str, str, tuple[str, ...]], ...] = (
    ("bakery", "Bakery", ("bread", "bagel", "muffin", "donut", "croissant")),
    ("dairy", "Dairy", ("milk", "cheese", "yogurt", "butter", "cream")),
    ("fruits", "Produce", ("apple", "banana", "orange", "grape", "berry")),
    ("vegetables", "Produce", ("lettuce", "tomato", "onion", "carrot", "potato")),
    ("meat", "Meat", ("chicken", "beef", "pork", "fish", "salmon")),
    ("drinks", "Beverages", ("juice", "soda", "water", "coffee", "tea")),
    ("grains", "Pantry", ("cereal", "pasta", "rice", "oats")),
    ("frozen", "Frozen", ("frozen",)),
)

DEFAULT_CATEGORY = "Other"


def categorize_item(name: str) -> str:
    lowered = name.lower()
    for _rule, category, keywords in _CATEGORY_RULES:
        if any(keyword in lowered for keyword in keywords):
            return category
    return DEFAULT_CATEGORY


def title_case(value: str) -> str:
    return " ".join(word[:1].upper() + word[1:] for word in value.lower().split(" "))


class LocalLineItemExtractor(LineItemExtractor):
    """Offline receipt parser based on line patterns and keyword categories.

    Deterministic, but misses items whose price sits on a separate line and
    has no notion of non-food items beyond the category rules.
    """

    mode = "local"

    async def extract(self, text: str) -> list[RawLineItem] | None:
        return self.parse(text)

    def parse(self, text: str) -> list[RawLineItem]:
        items: list[RawLineItem] = []
        for line in (text or "").split("\n"):
            if not line.strip():
                continue
            item = self.parse_line(line)
            if item is not None:
                items.append(item)
        logger.info("Local parser found %d items", len(items))
        return items

    @staticmethod
    def parse_line(line: str) -> RawLineItem | None:
        line = line.strip()
        if any(pattern.search(line) for pattern in _SKIP_PATTERNS):
            return None

        match = _ITEM_PATTERN.match(line)
        if match is None:
            return None

        quantity = int(match.group(1).strip()) if match.group(1) else 1
        name = match.group(2).strip()
        if len(name) < 3 or _NUMERIC_NAME.match(name):
            return None

        return RawLineItem(
            name=title_case(name),
            quantity=quantity,
            unit="item",
            price=float(match.group(3)),
            category=categorize_item(name),
        )


def create_line_item_extractor(
    config: PantryConfig, generator: TextGenerator | None = None
) -> LineItemExtractor:
    """Create the line-item extractor selected by ``extraction.mode``."""
    mode = config.extraction.mode

    match mode:
        case "llm":
            if generator is None:
                from ..llm import create_generator

                generator = create_generator(config)
            return DelegatedLineItemExtractor(generator)
        case "local":
            return LocalLineItemExtractor()
        case _:
            raise ValueError(
                f"Unknown extraction mode: {mode!r} (choose llm or local)"
            )
