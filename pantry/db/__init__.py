"""SQLite database module for the food inventory and product reference data."""

from .inventory import InventoryDB, suggest_expiration_date
from .products import ProductDB
from .schema import ensure_schema

__all__ = [
    "InventoryDB",
    "ProductDB",
    "ensure_schema",
    "suggest_expiration_date",
]
