"""Product lookup by barcode number."""

from __future__ import annotations

import re
import sqlite3
from pathlib import Path

from .schema import ensure_schema

_WHITESPACE = re.compile(r"\s+")


class ProductDB:
    """Manages the products table used to resolve scanned barcodes."""

    def __init__(self, db_path: str | Path = "~/.config/pantry/food_tracker.db") -> None:
        self._db_path = db_path
        self._conn: sqlite3.Connection | None = None

    def _get_conn(self) -> sqlite3.Connection:
        if self._conn is None:
            self._conn = ensure_schema(self._db_path)
        return self._conn

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def find_product_by_code(self, code: str) -> dict | None:
        """Return the product for a barcode, ignoring any whitespace in it."""
        normalized = _WHITESPACE.sub("", code or "")
        if not normalized:
            return None
        row = self._get_conn().execute(
            "SELECT * FROM products WHERE upc_code = ?", (normalized,)
        ).fetchone()
        return dict(row) if row else None

    def add_product(
        self,
        upc_code: str,
        name: str,
        category: str,
        shelf_life_days: int,
        *,
        description: str = "",
        brand: str = "",
        size: str = "",
        unit: str = "item",
        storage_type: str = "pantry",
        typical_quantity: float = 1.0,
    ) -> int:
        """Insert or replace a product. Returns the row ID."""
        conn = self._get_conn()
        cur = conn.execute(
            """INSERT OR REPLACE INTO products
               (upc_code, name, description, category, brand, size, unit,
                shelf_life_days, storage_type, typical_quantity)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
            (
                _WHITESPACE.sub("", upc_code),
                name,
                description,
                category,
                brand,
                size,
                unit,
                shelf_life_days,
                storage_type,
                typical_quantity,
            ),
        )
        conn.commit()
        return cur.lastrowid

    def lookup_shelf_life(self, food_name: str) -> dict:
        """Return the closest shelf-life reference row for a food name.

        The shortest reference name containing ``food_name`` wins. Unknown
        foods get a one-week pantry default.
        """
        name = (food_name or "").strip().lower()
        default = {
            "food_name": name,
            "category": "Other",
            "shelf_life_days": 7,
            "storage_type": "pantry",
        }
        if not name:
            return default

        row = self._get_conn().execute(
            """SELECT food_name, category, shelf_life_days, storage_type
               FROM food_expiration
               WHERE LOWER(food_name) LIKE ?
               ORDER BY LENGTH(food_name) ASC
               LIMIT 1""",
            (f"%{name}%",),
        ).fetchone()
        return dict(row) if row else default
