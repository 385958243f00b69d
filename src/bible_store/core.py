"""Core query and mutation API for bible-store.

Every function takes an open store connection (see ``db.bootstrap``).
Content tables are only read; topics, highlights and reflections are
written through the functions below.
"""

import sqlite3
from dataclasses import dataclass, field
from datetime import date as date_type
from datetime import datetime, timezone
from typing import Optional, Union

from .db import transaction

SAMPLE_MARKER = "%sample%"

DateLike = Union[datetime, date_type, str]


@dataclass
class Translation:
    """A Bible translation shipped in the bundled asset."""
    id: int
    code: str
    name: str


@dataclass
class Book:
    """A book of the Bible in canonical order."""
    id: int
    code: str
    name: str
    order_index: int


@dataclass
class Verse:
    """A verse with its book metadata and any highlight colour."""
    id: int
    book_code: str
    book_name: str
    chapter: int
    verse: int
    text: str
    color: Optional[str] = None


@dataclass
class Topic:
    """A user-defined topic that highlights can be filed under."""
    id: int
    name: str
    color: Optional[str] = None
    created_at: Optional[str] = None


@dataclass
class Highlight:
    """A highlight joined with its verse, book and optional topic."""
    id: int
    verse_id: int
    color: str
    created_at: Optional[str]
    topic_id: Optional[int]
    topic_name: Optional[str]
    text: str
    chapter: int
    verse: int
    book_id: int
    book_name: str
    book_code: str


@dataclass
class Reflection:
    """A journal entry; at most one per calendar day."""
    id: int
    day_key: str
    date: str
    verse: str
    text: str
    updated_at: str


@dataclass
class ChapterGap:
    """Verse numbers missing from a chapter's 1..max sequence."""
    book_id: int
    book_name: str
    chapter: int
    missing: list[int] = field(default_factory=list)


def _now_iso() -> str:
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat()


def parse_reflection_date(value: DateLike) -> tuple[str, str]:
    """Split a date-like value into (day_key, timestamp).

    The day key is the calendar date of the timestamp as given; no timezone
    conversion is applied. Strings are kept verbatim as the timestamp.

    Raises:
        ValueError: The string is not an ISO 8601 date or datetime.
        TypeError: The value is not a date, datetime or string.
    """
    if isinstance(value, datetime):
        return value.date().isoformat(), value.isoformat()
    if isinstance(value, date_type):
        return value.isoformat(), datetime(value.year, value.month, value.day).isoformat()
    if isinstance(value, str):
        text = value.strip()
        if not text:
            raise ValueError("Empty date")
        normalized = text[:-1] + "+00:00" if text.endswith(("Z", "z")) else text
        parsed = datetime.fromisoformat(normalized)
        return parsed.date().isoformat(), text
    raise TypeError(f"Expected date, datetime or ISO string, got {type(value).__name__}")


# --- Reference content ---


def get_translations(conn: sqlite3.Connection) -> list[Translation]:
    """List translations ordered by id, excluding sample content."""
    cursor = conn.execute(
        "SELECT id, code, name FROM translations WHERE name NOT LIKE ? ORDER BY id",
        (SAMPLE_MARKER,),
    )
    return [
        Translation(id=row["id"], code=row["code"], name=row["name"])
        for row in cursor.fetchall()
    ]


def get_books(conn: sqlite3.Connection) -> list[Book]:
    """List books in canonical order, excluding sample content."""
    cursor = conn.execute(
        """
        SELECT id, code, name, order_index
        FROM books
        WHERE name NOT LIKE ?
        ORDER BY order_index
        """,
        (SAMPLE_MARKER,),
    )
    return [
        Book(
            id=row["id"],
            code=row["code"],
            name=row["name"],
            order_index=row["order_index"],
        )
        for row in cursor.fetchall()
    ]


def get_verses(
    conn: sqlite3.Connection,
    translation_id: int,
    book_id: int,
    chapter: int,
) -> list[Verse]:
    """Get a chapter's verses in order, with any highlight colour."""
    cursor = conn.execute(
        """
        SELECT v.id, b.code AS book_code, b.name AS book_name,
               v.chapter, v.verse, v.text, h.color
        FROM verses v
        JOIN books b ON v.book_id = b.id
        LEFT JOIN highlights h ON v.id = h.verse_id
        WHERE v.translation_id = ? AND v.book_id = ? AND v.chapter = ?
        ORDER BY v.verse
        """,
        (translation_id, book_id, chapter),
    )
    return [
        Verse(
            id=row["id"],
            book_code=row["book_code"],
            book_name=row["book_name"],
            chapter=row["chapter"],
            verse=row["verse"],
            text=row["text"],
            color=row["color"],
        )
        for row in cursor.fetchall()
    ]


def get_chapter_count(conn: sqlite3.Connection, book_id: int, translation_id: int) -> int:
    """Highest chapter number for a book in a translation, 0 if none."""
    cursor = conn.execute(
        "SELECT MAX(chapter) AS count FROM verses WHERE book_id = ? AND translation_id = ?",
        (book_id, translation_id),
    )
    row = cursor.fetchone()
    return row["count"] if row and row["count"] is not None else 0


def verify_chapters(
    conn: sqlite3.Connection,
    translation_id: int,
    book_id: Optional[int] = None,
) -> list[ChapterGap]:
    """Find chapters whose verse numbering has gaps.

    Args:
        conn: Store connection.
        translation_id: Translation to check.
        book_id: Limit the check to one book.

    Returns:
        One ChapterGap per chapter with missing verse numbers, in canonical order.
    """
    query = """
        SELECT v.book_id, b.name AS book_name, v.chapter, v.verse
        FROM verses v
        JOIN books b ON v.book_id = b.id
        WHERE v.translation_id = ?
    """
    params: list = [translation_id]
    if book_id is not None:
        query += " AND v.book_id = ?"
        params.append(book_id)
    query += " ORDER BY b.order_index, v.chapter, v.verse"

    chapters: dict[tuple[int, int], tuple[str, set[int]]] = {}
    for row in conn.execute(query, params):
        key = (row["book_id"], row["chapter"])
        if key not in chapters:
            chapters[key] = (row["book_name"], set())
        chapters[key][1].add(row["verse"])

    gaps = []
    for (bid, chapter), (book_name, numbers) in chapters.items():
        missing = [n for n in range(1, max(numbers) + 1) if n not in numbers]
        if missing:
            gaps.append(ChapterGap(book_id=bid, book_name=book_name, chapter=chapter, missing=missing))
    return gaps


def store_counts(conn: sqlite3.Connection) -> dict[str, int]:
    """Row counts of content and user tables."""
    counts = {}
    for table in ("translations", "books", "verses", "topics", "highlights", "reflections"):
        cursor = conn.execute(f"SELECT COUNT(*) FROM {table}")
        counts[table] = cursor.fetchone()[0]
    return counts


# --- Highlights ---


def toggle_highlight(
    conn: sqlite3.Connection,
    verse_id: int,
    color: str,
    topic_id: Optional[int] = None,
) -> Optional[str]:
    """Set, change or clear the highlight on a verse.

    - No highlight yet: create one.
    - Same colour and topic: remove it.
    - Different colour or topic: update it in place.

    Args:
        conn: Store connection.
        verse_id: Verse to highlight.
        color: Highlight colour.
        topic_id: Optional topic to file the highlight under.

    Returns:
        The resulting colour, or None if the highlight was cleared.
    """
    with transaction(conn):
        cursor = conn.execute(
            "SELECT id, color, topic_id FROM highlights WHERE verse_id = ?",
            (verse_id,),
        )
        existing = cursor.fetchone()

        if existing is not None and existing["color"] == color and existing["topic_id"] == topic_id:
            conn.execute("DELETE FROM highlights WHERE id = ?", (existing["id"],))
            return None

        # The unique key on verse_id turns a racing insert into an update
        conn.execute(
            """
            INSERT INTO highlights (verse_id, color, topic_id) VALUES (?, ?, ?)
            ON CONFLICT(verse_id) DO UPDATE SET
              color = excluded.color,
              topic_id = excluded.topic_id
            """,
            (verse_id, color, topic_id),
        )
    return color


def get_highlights(conn: sqlite3.Connection) -> list[Highlight]:
    """List highlights with verse, book and topic details, newest first."""
    cursor = conn.execute(
        """
        SELECT h.id, h.verse_id, h.color, h.created_at, h.topic_id, t.name AS topic_name,
               v.text, v.chapter, v.verse, v.book_id, b.name AS book_name, b.code AS book_code
        FROM highlights h
        JOIN verses v ON h.verse_id = v.id
        JOIN books b ON v.book_id = b.id
        LEFT JOIN topics t ON h.topic_id = t.id
        ORDER BY h.created_at DESC, h.id DESC
        """
    )
    return [
        Highlight(
            id=row["id"],
            verse_id=row["verse_id"],
            color=row["color"],
            created_at=row["created_at"],
            topic_id=row["topic_id"],
            topic_name=row["topic_name"],
            text=row["text"],
            chapter=row["chapter"],
            verse=row["verse"],
            book_id=row["book_id"],
            book_name=row["book_name"],
            book_code=row["book_code"],
        )
        for row in cursor.fetchall()
    ]


# --- Topics ---


def get_topics(conn: sqlite3.Connection) -> list[Topic]:
    cursor = conn.execute("SELECT id, name, color, created_at FROM topics ORDER BY name")
    return [
        Topic(id=row["id"], name=row["name"], color=row["color"], created_at=row["created_at"])
        for row in cursor.fetchall()
    ]


def create_topic(conn: sqlite3.Connection, name: str, color: Optional[str] = None) -> int:
    """Create a topic, or return the id of the existing topic with that name.

    Returns:
        The topic ID.
    """
    name = name.strip()
    if not name:
        raise ValueError("Topic name must not be empty")

    with transaction(conn):
        conn.execute(
            "INSERT OR IGNORE INTO topics (name, color) VALUES (?, ?)",
            (name, color),
        )
        cursor = conn.execute("SELECT id FROM topics WHERE name = ?", (name,))
        return cursor.fetchone()["id"]


# --- Reflections ---


def _row_to_reflection(row: sqlite3.Row) -> Reflection:
    return Reflection(
        id=row["id"],
        day_key=row["day_key"],
        date=row["date"],
        verse=row["verse"],
        text=row["text"],
        updated_at=row["updated_at"],
    )


def upsert_reflection(
    conn: sqlite3.Connection,
    day_key: str,
    date: str,
    verse: str,
    text: str,
) -> None:
    """Insert a reflection for a day, or overwrite the day's verse and text.

    Does not manage transactions; callers wrap it.
    """
    conn.execute(
        """
        INSERT INTO reflections (day_key, date, verse, text, updated_at)
        VALUES (?, ?, ?, ?, ?)
        ON CONFLICT(day_key) DO UPDATE SET
          verse = excluded.verse,
          text = excluded.text,
          updated_at = excluded.updated_at
        """,
        (day_key, date, verse, text, _now_iso()),
    )


def get_reflection_for_day(conn: sqlite3.Connection, day_key: str) -> Optional[Reflection]:
    cursor = conn.execute("SELECT * FROM reflections WHERE day_key = ?", (day_key,))
    row = cursor.fetchone()
    return _row_to_reflection(row) if row else None


def get_reflections(conn: sqlite3.Connection) -> list[Reflection]:
    """List reflections, newest day first."""
    cursor = conn.execute("SELECT * FROM reflections ORDER BY day_key DESC, id DESC")
    return [_row_to_reflection(row) for row in cursor.fetchall()]


def count_reflections(conn: sqlite3.Connection) -> int:
    cursor = conn.execute("SELECT COUNT(*) FROM reflections")
    return cursor.fetchone()[0]


def save_reflection(
    conn: sqlite3.Connection,
    date: DateLike,
    verse: str,
    text: str,
) -> Reflection:
    """Save the reflection for the calendar day of ``date``.

    Writing again on the same day replaces the verse and text.

    Returns:
        The persisted reflection.
    """
    day_key, timestamp = parse_reflection_date(date)
    with transaction(conn):
        upsert_reflection(conn, day_key, timestamp, verse, text)
    return get_reflection_for_day(conn, day_key)


def delete_reflection(conn: sqlite3.Connection, reflection_id: int) -> None:
    """Delete a reflection by id; unknown ids are ignored."""
    with transaction(conn):
        conn.execute("DELETE FROM reflections WHERE id = ?", (reflection_id,))
