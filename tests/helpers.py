"""Test helper utilities.

This module provides helper functions for writing tests, including:
- A builder for the bundled content asset
- Database helpers for inspecting state
"""

from __future__ import annotations

import sqlite3
from pathlib import Path

from bible_store.schema import FTS_REBUILD_SQL, FTS_TABLE_SQL


# -----------------------------------------------------------------------------
# Content Fixtures
# -----------------------------------------------------------------------------

TRANSLATIONS = [
    (1, "KJV", "King James Version"),
    (2, "WEB", "World English Bible"),
    (3, "SMP", "Sample Translation"),
]

BOOKS = [
    (1, "GEN", "Genesis", 1),
    (2, "PSA", "Psalms", 19),
    (3, "JHN", "John", 43),
    (4, "SMP", "Sample Book", 99),
]

# (id, translation_id, book_id, chapter, verse, text)
# Psalms 23 deliberately lacks verse 3.
VERSES = [
    (1, 1, 1, 1, 1, "In the beginning God created the heaven and the earth."),
    (2, 1, 1, 1, 2, "And the earth was without form, and void; and darkness was upon the face of the deep."),
    (3, 1, 1, 1, 3, "And God said, Let there be light: and there was light."),
    (4, 1, 1, 2, 1, "Thus the heavens and the earth were finished, and all the host of them."),
    (5, 1, 2, 23, 1, "The LORD is my shepherd; I shall not want."),
    (6, 1, 2, 23, 2, "He maketh me to lie down in green pastures: he leadeth me beside the still waters."),
    (7, 1, 2, 23, 4, "Yea, though I walk through the valley of the shadow of death, I will fear no evil."),
    (8, 1, 3, 1, 1, "In the beginning was the Word, and the Word was with God, and the Word was God."),
    (9, 1, 3, 3, 16, "For God so loved the world, that he gave his only begotten Son."),
    (10, 2, 1, 1, 1, "In the beginning, God created the heavens and the earth."),
]

# Verse ids used across tests
GENESIS_1_1 = 1
PSALM_23_1 = 5
JOHN_3_16 = 9


def build_asset(path: Path, with_fts: bool = True) -> Path:
    """Write a small bundled content database to ``path``."""
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(path))
    try:
        conn.executescript(
            """
            CREATE TABLE translations (
                id INTEGER PRIMARY KEY,
                code TEXT NOT NULL,
                name TEXT NOT NULL
            );
            CREATE TABLE books (
                id INTEGER PRIMARY KEY,
                code TEXT NOT NULL,
                name TEXT NOT NULL,
                order_index INTEGER NOT NULL
            );
            CREATE TABLE verses (
                id INTEGER PRIMARY KEY,
                translation_id INTEGER NOT NULL REFERENCES translations(id),
                book_id INTEGER NOT NULL REFERENCES books(id),
                chapter INTEGER NOT NULL,
                verse INTEGER NOT NULL,
                text TEXT NOT NULL
            );
            """
        )
        conn.executemany("INSERT INTO translations VALUES (?, ?, ?)", TRANSLATIONS)
        conn.executemany("INSERT INTO books VALUES (?, ?, ?, ?)", BOOKS)
        conn.executemany("INSERT INTO verses VALUES (?, ?, ?, ?, ?, ?)", VERSES)
        if with_fts:
            conn.execute(FTS_TABLE_SQL)
            conn.execute(FTS_REBUILD_SQL)
        conn.commit()
    finally:
        conn.close()
    return path


# -----------------------------------------------------------------------------
# Database Helpers
# -----------------------------------------------------------------------------


def count_rows(conn: sqlite3.Connection, table: str) -> int:
    """Count rows in a table."""
    cursor = conn.execute(f"SELECT COUNT(*) FROM {table}")
    return cursor.fetchone()[0]


def table_exists(conn: sqlite3.Connection, table: str) -> bool:
    cursor = conn.execute(
        "SELECT name FROM sqlite_master WHERE type='table' AND name=?",
        (table,),
    )
    return cursor.fetchone() is not None


def get_table_columns(conn: sqlite3.Connection, table: str) -> list[str]:
    """Get column names for a table."""
    cursor = conn.execute(f"PRAGMA table_info({table})")
    return [row[1] for row in cursor.fetchall()]
