"""Database schema definitions for bible-store.

Content tables (translations, books, verses, verses_fts) ship in the bundled
asset and are never created or altered here. Only user data tables are owned
by this module.
"""

SCHEMA_VERSION = 3

# Tables the bundled asset must provide for the store to be usable
CONTENT_TABLES = ("translations", "books", "verses")

FTS_TABLE = "verses_fts"

# User data schema (idempotent)
SCHEMA_SQL = """
-- Metadata table
CREATE TABLE IF NOT EXISTS meta (
    key TEXT PRIMARY KEY,
    value TEXT
);

-- Topics group highlights; names are unique
CREATE TABLE IF NOT EXISTS topics (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL UNIQUE,
    color TEXT,
    created_at DATETIME DEFAULT CURRENT_TIMESTAMP
);

-- At most one highlight per verse
CREATE TABLE IF NOT EXISTS highlights (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    verse_id INTEGER NOT NULL,
    color TEXT NOT NULL,
    topic_id INTEGER,
    created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
    FOREIGN KEY (verse_id) REFERENCES verses(id),
    FOREIGN KEY (topic_id) REFERENCES topics(id),
    UNIQUE(verse_id)
);

-- At most one reflection per calendar day
CREATE TABLE IF NOT EXISTS reflections (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    day_key TEXT NOT NULL UNIQUE,           -- YYYY-MM-DD
    date TEXT NOT NULL,                     -- full ISO timestamp of the first write
    verse TEXT NOT NULL,                    -- verse reference, e.g. "Psalm 23:1"
    text TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_highlights_created ON highlights(created_at);
"""

# Unique keys re-asserted as indexes, for stores whose tables predate the
# UNIQUE constraints above.
UNIQUE_INDEX_SQL = (
    "CREATE UNIQUE INDEX IF NOT EXISTS idx_highlights_verse ON highlights(verse_id)",
    "CREATE UNIQUE INDEX IF NOT EXISTS idx_reflections_day ON reflections(day_key)",
)

# Additive column migrations: (table, column, definition)
# v2: highlights gained topic_id
# v3: topics gained color, reflections gained updated_at
COLUMN_MIGRATIONS = (
    ("highlights", "topic_id", "INTEGER REFERENCES topics(id)"),
    ("topics", "color", "TEXT"),
    ("reflections", "updated_at", "TEXT NOT NULL DEFAULT ''"),
)

# External-content FTS5 index over verse text; rowid is verses.id
FTS_TABLE_SQL = f"""
CREATE VIRTUAL TABLE IF NOT EXISTS {FTS_TABLE} USING fts5(
    text,
    content='verses',
    content_rowid='id',
    tokenize='unicode61'
);
"""

FTS_REBUILD_SQL = f"INSERT INTO {FTS_TABLE}({FTS_TABLE}) VALUES('rebuild')"

# Indexes on migrated columns; created after COLUMN_MIGRATIONS run
POST_MIGRATION_SQL = (
    "CREATE INDEX IF NOT EXISTS idx_highlights_topic ON highlights(topic_id)",
)
