"""Verse search for bible-store.

Search degrades in a fixed order:
  1. Full-text lookup against the FTS5 index, ranked by relevance.
  2. Case-insensitive substring scan over verse text and book name.
  3. An empty result.

A failure in one layer moves on to the next; callers never see an error.
"""

from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass, field
from enum import Enum

from .schema import FTS_TABLE

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 50


class SearchLayer(str, Enum):
    """Which layer of the degradation chain produced a result."""
    FULL_TEXT = "full_text"
    SUBSTRING = "substring"
    EMPTY_QUERY = "empty_query"
    FAILED = "failed"


@dataclass
class SearchHit:
    """A verse matching a search query."""
    id: int
    book_code: str
    book_name: str
    chapter: int
    verse: int
    text: str


@dataclass
class SearchOutcome:
    """Search results tagged with the layer that served them."""
    hits: list[SearchHit]
    layer: SearchLayer
    errors: list[str] = field(default_factory=list)


FULL_TEXT_SQL = f"""
SELECT v.id, b.code AS book_code, b.name AS book_name, v.chapter, v.verse, v.text
FROM {FTS_TABLE}
JOIN verses v ON {FTS_TABLE}.rowid = v.id
JOIN books b ON v.book_id = b.id
WHERE {FTS_TABLE} MATCH ? AND v.translation_id = ?
ORDER BY {FTS_TABLE}.rank
LIMIT ?
"""

SUBSTRING_SQL = """
SELECT v.id, b.code AS book_code, b.name AS book_name, v.chapter, v.verse, v.text
FROM verses v
JOIN books b ON v.book_id = b.id
WHERE (v.text LIKE ? ESCAPE '\\' OR b.name LIKE ? ESCAPE '\\') AND v.translation_id = ?
ORDER BY b.order_index, v.chapter, v.verse
LIMIT ?
"""


def _like_pattern(query: str) -> str:
    """Wrap a query in % wildcards, escaping LIKE metacharacters."""
    escaped = query.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def _rows_to_hits(rows: list[sqlite3.Row]) -> list[SearchHit]:
    return [
        SearchHit(
            id=row["id"],
            book_code=row["book_code"],
            book_name=row["book_name"],
            chapter=row["chapter"],
            verse=row["verse"],
            text=row["text"],
        )
        for row in rows
    ]


def full_text_search(
    conn: sqlite3.Connection, query: str, translation_id: int, limit: int
) -> list[SearchHit]:
    """Search the FTS index. Raises if the index is missing or the query is invalid."""
    cursor = conn.execute(FULL_TEXT_SQL, (query, translation_id, limit))
    return _rows_to_hits(cursor.fetchall())


def substring_search(
    conn: sqlite3.Connection, query: str, translation_id: int, limit: int
) -> list[SearchHit]:
    """Scan verse text and book names for a case-insensitive substring."""
    pattern = _like_pattern(query)
    cursor = conn.execute(SUBSTRING_SQL, (pattern, pattern, translation_id, limit))
    return _rows_to_hits(cursor.fetchall())


def run_search(
    conn: sqlite3.Connection,
    query: str,
    translation_id: int,
    limit: int = DEFAULT_LIMIT,
) -> SearchOutcome:
    """Search verses, recording which layer served the result."""
    query = (query or "").strip()
    if not query:
        return SearchOutcome(hits=[], layer=SearchLayer.EMPTY_QUERY)

    errors = []

    try:
        hits = full_text_search(conn, query, translation_id, limit)
        return SearchOutcome(hits=hits, layer=SearchLayer.FULL_TEXT)
    except Exception as e:
        logger.debug("Full-text search unavailable, falling back to substring scan: %s", e)
        errors.append(f"full_text: {e}")

    try:
        hits = substring_search(conn, query, translation_id, limit)
        return SearchOutcome(hits=hits, layer=SearchLayer.SUBSTRING, errors=errors)
    except Exception as e:
        logger.warning("Search failed completely for %r: %s", query, e)
        errors.append(f"substring: {e}")

    return SearchOutcome(hits=[], layer=SearchLayer.FAILED, errors=errors)


def search_verses(
    conn: sqlite3.Connection,
    query: str,
    translation_id: int,
    limit: int = DEFAULT_LIMIT,
) -> list[SearchHit]:
    """Search verses in a translation; never raises."""
    return run_search(conn, query, translation_id, limit).hits
