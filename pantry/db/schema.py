"""Database schema definitions and migration helpers."""

from __future__ import annotations

import sqlite3
from pathlib import Path

_SCHEMA_VERSION = 1

_DDL = """
CREATE TABLE IF NOT EXISTS food_items (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    description TEXT,
    category TEXT NOT NULL DEFAULT 'Other',
    expiration_date TEXT NOT NULL,
    added_date TEXT NOT NULL DEFAULT (datetime('now', 'localtime')),
    upc_code TEXT,
    quantity REAL NOT NULL DEFAULT 1,
    unit TEXT NOT NULL DEFAULT 'item',
    price REAL
);

CREATE INDEX IF NOT EXISTS idx_food_items_expiration ON food_items(expiration_date);
CREATE INDEX IF NOT EXISTS idx_food_items_category ON food_items(category);

CREATE TABLE IF NOT EXISTS products (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    upc_code TEXT UNIQUE NOT NULL,
    name TEXT NOT NULL,
    description TEXT,
    category TEXT NOT NULL,
    brand TEXT,
    size TEXT,
    unit TEXT NOT NULL DEFAULT 'item',
    shelf_life_days INTEGER NOT NULL,
    storage_type TEXT NOT NULL DEFAULT 'pantry',
    typical_quantity REAL NOT NULL DEFAULT 1,
    created_at TEXT NOT NULL DEFAULT (datetime('now', 'localtime')),
    updated_at TEXT NOT NULL DEFAULT (datetime('now', 'localtime'))
);

CREATE TABLE IF NOT EXISTS food_expiration (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    food_name TEXT NOT NULL UNIQUE,
    category TEXT NOT NULL,
    shelf_life_days INTEGER NOT NULL,
    storage_type TEXT NOT NULL DEFAULT 'pantry'
);

CREATE TABLE IF NOT EXISTS schema_version (
    version INTEGER NOT NULL
);
"""

# (upc_code, name, description, category, brand, size, unit,
#  shelf_life_days, storage_type, typical_quantity)
_SEED_PRODUCTS: list[tuple] = [
    ("8743612389", "Joe's Eggs", "Large brown eggs", "Dairy", "Joe's Farm", "12 count", "item", 21, "refrigerator", 12),
    ("8789572389", "Milk 2%", "Reduced fat milk", "Dairy", "Generic", "1 gallon", "item", 7, "refrigerator", 1),
    ("1234567890", "Bread Loaf", "Whole wheat sandwich bread", "Bakery", "Bakery Co", "24 oz", "item", 5, "pantry", 1),
    ("041196910756", "Bananas", "Yellow Cavendish bananas", "Produce", "Dole", "1 bunch", "item", 7, "pantry", 1),
    ("011110826467", "Apples", "Red Delicious apples", "Produce", "Washington", "3 lb bag", "lbs", 14, "refrigerator", 3),
    ("04167000432", "Chicken Breast", "Boneless skinless chicken breast", "Meat", "Tyson", "1.5 lb", "lbs", 2, "refrigerator", 1.5),
    ("041000021249", "Yogurt", "Plain Greek yogurt", "Dairy", "Chobani", "32 oz", "oz", 14, "refrigerator", 32),
    ("011110038497", "Orange Juice", "100% pure squeezed orange juice", "Beverages", "Tropicana", "59 oz", "oz", 14, "refrigerator", 59),
]

# (food_name, category, shelf_life_days, storage_type)
_SEED_EXPIRATION: list[tuple] = [
    ("Milk", "Dairy", 7, "refrigerator"),
    ("Eggs", "Dairy", 21, "refrigerator"),
    ("Bread", "Bakery", 5, "pantry"),
    ("Apples", "Produce", 14, "refrigerator"),
    ("Bananas", "Produce", 7, "pantry"),
    ("Chicken", "Meat", 2, "refrigerator"),
    ("Canned Beans", "Pantry", 730, "pantry"),
    ("Rice", "Pantry", 1095, "pantry"),
]


def _seed(conn: sqlite3.Connection) -> None:
    conn.executemany(
        """INSERT OR IGNORE INTO products
           (upc_code, name, description, category, brand, size, unit,
            shelf_life_days, storage_type, typical_quantity)
           VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
        _SEED_PRODUCTS,
    )
    conn.executemany(
        """INSERT OR IGNORE INTO food_expiration
           (food_name, category, shelf_life_days, storage_type)
           VALUES (?, ?, ?, ?)""",
        _SEED_EXPIRATION,
    )


def ensure_schema(db_path: str | Path) -> sqlite3.Connection:
    """Open (or create) the database and ensure the schema is up to date.

    Reference products and shelf-life rows are seeded when the schema is
    first created.

    Args:
        db_path: Path to the SQLite database file.

    Returns:
        An open sqlite3.Connection with the schema applied.
    """
    db_path = Path(db_path).expanduser()
    db_path.parent.mkdir(parents=True, exist_ok=True)

    # Shared with the HTTP server's worker thread.
    conn = sqlite3.connect(str(db_path), check_same_thread=False)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute("PRAGMA foreign_keys=ON")

    # Check current schema version
    try:
        row = conn.execute("SELECT version FROM schema_version").fetchone()
        current_version = row["version"] if row else 0
    except sqlite3.OperationalError:
        current_version = 0

    if current_version < _SCHEMA_VERSION:
        conn.executescript(_DDL)
        _seed(conn)
        conn.execute("DELETE FROM schema_version")
        conn.execute(
            "INSERT INTO schema_version (version) VALUES (?)",
            (_SCHEMA_VERSION,),
        )
        conn.commit()

    return conn
