"""Food inventory CRUD operations."""

from __future__ import annotations

import sqlite3
from datetime import date, timedelta
from pathlib import Path
from typing import TYPE_CHECKING

from .schema import ensure_schema

if TYPE_CHECKING:
    from ..analysis.models import ValidatedLineItem

# Category-based shelf-life estimates (days from purchase)
_SHELF_LIFE_DAYS: dict[str, int] = {
    "produce": 7,
    "fruits": 7,
    "vegetables": 10,
    "dairy": 14,
    "meat": 3,
    "seafood": 2,
    "bakery": 5,
    "frozen": 90,
    "canned goods": 730,
}

_DEFAULT_SHELF_LIFE = 14

_DAYS_LEFT = "CAST(julianday(expiration_date) - julianday(?) AS INTEGER)"


def suggest_expiration_date(category: str, purchased: date | None = None) -> date:
    """Estimate an expiration date from the food category."""
    purchased = purchased or date.today()
    days = _SHELF_LIFE_DAYS.get((category or "").strip().lower(), _DEFAULT_SHELF_LIFE)
    return purchased + timedelta(days=days)


class InventoryDB:
    """Manages the food_items table."""

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

    def add_item(
        self,
        name: str,
        category: str,
        expiration_date: str,
        *,
        description: str | None = None,
        upc_code: str | None = None,
        quantity: float = 1,
        unit: str = "item",
        price: float | None = None,
    ) -> int:
        """Insert one item. Returns the new row ID."""
        if not name:
            raise ValueError("name is required")
        if not expiration_date:
            raise ValueError("expiration_date is required")
        date.fromisoformat(expiration_date)

        conn = self._get_conn()
        cur = conn.execute(
            """INSERT INTO food_items
               (name, description, category, expiration_date, upc_code,
                quantity, unit, price)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?)""",
            (name, description, category, expiration_date, upc_code,
             quantity, unit, price),
        )
        conn.commit()
        return cur.lastrowid

    def add_line_items(
        self, items: list[ValidatedLineItem], purchased: date | None = None
    ) -> list[int]:
        """Insert validated receipt items with estimated expiration dates.

        Returns:
            List of inserted row IDs.
        """
        ids: list[int] = []
        for item in items:
            expiry = suggest_expiration_date(item.category, purchased)
            ids.append(
                self.add_item(
                    item.name,
                    item.category,
                    expiry.isoformat(),
                    quantity=item.quantity,
                    unit=item.unit,
                    price=item.price,
                )
            )
        return ids

    def list_items(self, today: date | None = None) -> list[dict]:
        """Return all items with ``days_left``, soonest expiry first."""
        target = (today or date.today()).isoformat()
        rows = self._get_conn().execute(
            f"""SELECT id, name, description, category, expiration_date,
                       added_date, upc_code, quantity, unit, price,
                       {_DAYS_LEFT} AS days_left
                FROM food_items
                ORDER BY days_left ASC""",
            (target,),
        ).fetchall()
        return [dict(r) for r in rows]

    def update_quantity(self, item_id: int, quantity: float) -> bool:
        """Set an item's quantity; a quantity of zero or less deletes it.

        Returns:
            True if the item was deleted.
        """
        if quantity <= 0:
            self.delete_item(item_id)
            return True

        conn = self._get_conn()
        conn.execute(
            "UPDATE food_items SET quantity = ? WHERE id = ?", (quantity, item_id)
        )
        conn.commit()
        return False

    def delete_item(self, item_id: int) -> bool:
        """Delete an inventory item by ID. Returns False if it didn't exist."""
        conn = self._get_conn()
        cur = conn.execute("DELETE FROM food_items WHERE id = ?", (item_id,))
        conn.commit()
        return cur.rowcount > 0

    def category_counts(self, today: date | None = None) -> list[dict]:
        """Count non-expired items per category."""
        target = (today or date.today()).isoformat()
        rows = self._get_conn().execute(
            f"""SELECT category, COUNT(*) AS count
                FROM food_items
                WHERE {_DAYS_LEFT} > 0
                GROUP BY category
                ORDER BY category""",
            (target,),
        ).fetchall()
        return [dict(r) for r in rows]

    def get_expiring(
        self, days: int = 7, limit: int = 10, today: date | None = None
    ) -> list[dict]:
        """Return items expiring within ``days`` that haven't expired yet."""
        target = (today or date.today()).isoformat()
        rows = self._get_conn().execute(
            f"""SELECT name, category, {_DAYS_LEFT} AS days_left
                FROM food_items
                WHERE {_DAYS_LEFT} <= ? AND {_DAYS_LEFT} >= 0
                ORDER BY days_left ASC
                LIMIT ?""",
            (target, target, days, target, limit),
        ).fetchall()
        return [dict(r) for r in rows]
