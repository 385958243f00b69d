"""Database bootstrap and connection management for bible-store.

Bootstrap sequence:
  1. Resolve the bundled asset and the writable destination.
  2. Copy the asset over the destination when it is missing (always in
     development mode).
  3. Open the destination and probe its structure.
  4. On a corruption signature, quarantine the file, copy a fresh asset and
     retry the open exactly once.
  5. Apply the additive schema migrations.
"""

from __future__ import annotations

import logging
import os
import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Generator, Optional

from .config import Config, get_config
from .copier import atomic_copy, temp_path_for
from .errors import StoreCorruptionError, StoreOpenError
from .paths import destination_path, resolve_asset, side_files
from .schema import (
    COLUMN_MIGRATIONS,
    CONTENT_TABLES,
    FTS_REBUILD_SQL,
    FTS_TABLE,
    FTS_TABLE_SQL,
    POST_MIGRATION_SQL,
    SCHEMA_SQL,
    SCHEMA_VERSION,
    UNIQUE_INDEX_SQL,
)

logger = logging.getLogger(__name__)

BUSY_TIMEOUT_S = 5.0

QUARANTINE_MARKER = ".corrupt-"

# Error messages SQLite produces for damaged or foreign files
CORRUPTION_SIGNATURES = (
    "database disk image is malformed",
    "file is not a database",
    "malformed database",
    "database corrupt",
    "not a valid store",
)

# SQLITE_CORRUPT, SQLITE_NOTADB
CORRUPTION_CODES = frozenset({11, 26})


class RecoveryState(str, Enum):
    """Where bootstrap ended up while opening the writable store."""
    OPENING = "opening"
    RECOVERING = "recovering"
    READY = "ready"
    FAILED = "failed"


@dataclass
class Bootstrap:
    """Result of a successful bootstrap.

    ``recovered`` is set when the store failed validation and was restored
    from the bundled asset; ``quarantined`` then holds the damaged copy.
    """
    conn: sqlite3.Connection
    path: Path
    asset: Path
    copied: bool = False
    quarantined: Optional[Path] = None
    recovered: bool = False
    state: RecoveryState = RecoveryState.READY


def is_corruption_error(exc: BaseException) -> bool:
    """Check whether an error matches a known corruption signature."""
    code = getattr(exc, "sqlite_errorcode", None)
    if isinstance(code, int) and (code & 0xFF) in CORRUPTION_CODES:
        return True
    message = str(exc).lower()
    return any(signature in message for signature in CORRUPTION_SIGNATURES)


def _get_connection(db_path: Path) -> sqlite3.Connection:
    """Create a read-write connection with explicit transaction control.

    The connection is created on the init worker thread and then used by its
    single owner, so same-thread checking is disabled.
    """
    conn = sqlite3.connect(
        str(db_path),
        timeout=BUSY_TIMEOUT_S,
        isolation_level=None,
        check_same_thread=False,
    )
    conn.row_factory = sqlite3.Row
    return conn


def open_store(db_path: Path) -> sqlite3.Connection:
    """Open the writable store and run a cheap structural probe.

    Raises:
        StoreCorruptionError: The file is damaged or is not a content store.
        StoreOpenError: Any other failure (permissions, I/O).
    """
    conn = None
    try:
        conn = _get_connection(db_path)
        cursor = conn.execute(
            "SELECT name FROM sqlite_master WHERE type IN ('table', 'view')"
        )
        names = {row["name"] for row in cursor.fetchall()}
        missing = [table for table in CONTENT_TABLES if table not in names]
        if missing:
            raise StoreCorruptionError(
                f"{db_path} is not a valid store: missing tables {', '.join(missing)}",
                db_path,
            )
        conn.execute("PRAGMA foreign_keys=ON")
        conn.execute("PRAGMA journal_mode=WAL")
    except StoreCorruptionError:
        conn.close()
        raise
    except sqlite3.Error as e:
        if conn is not None:
            conn.close()
        if is_corruption_error(e):
            raise StoreCorruptionError(f"{db_path}: {e}", db_path) from e
        raise StoreOpenError(f"Could not open store at {db_path}: {e}") from e

    return conn


def quarantine(db_path: Path) -> Path:
    """Rename a suspect store (and its journal files) aside for inspection.

    Returns:
        The quarantine path of the main database file.
    """
    stamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%S%fZ")
    target = db_path.with_name(f"{db_path.name}{QUARANTINE_MARKER}{stamp}")
    os.replace(db_path, target)

    for side in side_files(db_path):
        if side.exists():
            suffix = side.name[len(db_path.name):]
            os.replace(side, target.with_name(target.name + suffix))

    logger.warning("Quarantined corrupt store %s -> %s", db_path, target)
    return target


def list_quarantined(config: Optional[Config] = None) -> list[Path]:
    """Quarantined store files in the data directory, oldest first."""
    if config is None:
        config = get_config()

    if not config.data_dir.exists():
        return []

    pattern = f"{config.db_filename}{QUARANTINE_MARKER}*"
    return sorted(
        p for p in config.data_dir.glob(pattern)
        if not p.name.endswith(("-wal", "-shm", "-journal"))
    )


def _copy_asset(asset: Path, dest: Path) -> None:
    """Copy the bundled asset over the destination, discarding stale journals."""
    try:
        for side in side_files(dest):
            side.unlink(missing_ok=True)
        atomic_copy(asset, dest)
    except OSError as e:
        raise StoreOpenError(
            f"Could not copy bundled database {asset} to {dest}: {e}"
        ) from e


@contextmanager
def transaction(conn: sqlite3.Connection) -> Generator[sqlite3.Connection, None, None]:
    """Run a block inside BEGIN IMMEDIATE ... COMMIT, rolling back on error."""
    conn.execute("BEGIN IMMEDIATE")
    try:
        yield conn
    except BaseException:
        conn.execute("ROLLBACK")
        raise
    conn.execute("COMMIT")


def _existing_columns(conn: sqlite3.Connection, table: str) -> set[str]:
    cursor = conn.execute(f"PRAGMA table_info({table})")
    return {row["name"] for row in cursor.fetchall()}


def ensure_schema(conn: sqlite3.Connection) -> None:
    """Create user tables and apply additive column migrations.

    Safe to run on every start. Only additive, backward-compatible changes
    belong here.
    """
    conn.executescript(SCHEMA_SQL)

    for statement in UNIQUE_INDEX_SQL:
        try:
            conn.execute(statement)
        except sqlite3.IntegrityError as e:
            logger.warning("Could not add unique index (%s): %s", statement, e)

    for table, column, definition in COLUMN_MIGRATIONS:
        if column in _existing_columns(conn, table):
            continue
        try:
            conn.execute(f"ALTER TABLE {table} ADD COLUMN {column} {definition}")
            logger.info("Migrated %s: added column %s", table, column)
        except sqlite3.OperationalError as e:
            logger.warning(
                "Column migration %s.%s not applied, treating as present: %s",
                table, column, e,
            )

    for statement in POST_MIGRATION_SQL:
        conn.execute(statement)

    conn.execute(
        "INSERT OR REPLACE INTO meta (key, value) VALUES ('schema_version', ?)",
        (str(SCHEMA_VERSION),),
    )


def get_schema_version(conn: sqlite3.Connection) -> Optional[int]:
    """Get the schema version recorded in the store."""
    cursor = conn.execute("SELECT value FROM meta WHERE key = 'schema_version'")
    row = cursor.fetchone()
    return int(row[0]) if row else None


def has_search_index(conn: sqlite3.Connection) -> bool:
    cursor = conn.execute(
        "SELECT name FROM sqlite_master WHERE name = ?", (FTS_TABLE,)
    )
    return cursor.fetchone() is not None


def rebuild_search_index(conn: sqlite3.Connection) -> int:
    """Recreate the full-text index over verse text.

    Returns:
        Number of verses indexed.
    """
    with transaction(conn):
        conn.execute(f"DROP TABLE IF EXISTS {FTS_TABLE}")
        conn.execute(FTS_TABLE_SQL)
        conn.execute(FTS_REBUILD_SQL)
    cursor = conn.execute("SELECT COUNT(*) FROM verses")
    return cursor.fetchone()[0]


def bootstrap(config: Optional[Config] = None) -> Bootstrap:
    """Turn the bundled asset into an open, validated, migrated writable store.

    Args:
        config: Configuration to use. Defaults to global config.

    Returns:
        Bootstrap holding the open connection.

    Raises:
        BootstrapError: The asset is missing or the store cannot be opened.
        StoreCorruptionError: The store is still corrupt after one recovery.
    """
    if config is None:
        config = get_config()

    asset = resolve_asset(config)
    dest = destination_path(config)

    # A leftover temp file means a previous copy was interrupted
    temp_path_for(dest).unlink(missing_ok=True)

    copied = False
    if config.is_development or not dest.exists():
        logger.info("Copying bundled database %s to writable location %s", asset, dest)
        _copy_asset(asset, dest)
        copied = True

    state = RecoveryState.OPENING
    quarantined = None
    try:
        conn = open_store(dest)
    except StoreCorruptionError as e:
        state = RecoveryState.RECOVERING
        logger.warning("Store at %s failed validation (%s); restoring from %s", dest, e, asset)
        try:
            quarantined = quarantine(dest)
        except OSError as qe:
            raise StoreOpenError(f"Could not quarantine corrupt store {dest}: {qe}") from qe
        _copy_asset(asset, dest)
        copied = True
        conn = open_store(dest)

    try:
        ensure_schema(conn)
        conn.execute(
            "INSERT OR REPLACE INTO meta (key, value) VALUES ('last_bootstrap', ?)",
            (datetime.now(timezone.utc).replace(microsecond=0).isoformat(),),
        )
    except sqlite3.Error as e:
        conn.close()
        if is_corruption_error(e):
            raise StoreCorruptionError(f"{dest}: {e}", dest) from e
        raise StoreOpenError(f"Could not migrate store at {dest}: {e}") from e

    if state is RecoveryState.RECOVERING:
        logger.info("Recovered store at %s (corrupt copy kept at %s)", dest, quarantined)
    logger.info("Database connected at %s", dest)

    return Bootstrap(
        conn=conn,
        path=dest,
        asset=asset,
        copied=copied,
        quarantined=quarantined,
        recovered=state is RecoveryState.RECOVERING,
        state=RecoveryState.READY,
    )


@contextmanager
def get_store(config: Optional[Config] = None) -> Generator[sqlite3.Connection, None, None]:
    """Bootstrap the store and yield its connection as a context manager."""
    boot = bootstrap(config)
    try:
        yield boot.conn
    finally:
        boot.conn.close()
