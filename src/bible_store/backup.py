"""Backup export and import for bible-store.

Payload format (JSON):

    {
      "version": 1,
      "exportedAt": "2026-10-19T08:00:00+00:00",
      "reflections": [
        {"dayKey": "2026-10-18", "date": "...", "verse": "Psalm 23:1", "text": "..."}
      ]
    }

Reflections are the only entity exported. Import merges by day key.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional, Union

from . import core
from .copier import atomic_write_bytes
from .db import transaction
from .errors import BackupValidationError

logger = logging.getLogger(__name__)

BACKUP_VERSION = 1

REQUIRED_RECORD_FIELDS = ("date", "verse", "text")


@dataclass
class BackupRecord:
    """One reflection as it appears in a backup."""
    day_key: str
    date: str
    verse: str
    text: str

    def to_dict(self) -> dict:
        return {
            "dayKey": self.day_key,
            "date": self.date,
            "verse": self.verse,
            "text": self.text,
        }


@dataclass
class BackupPayload:
    """Versioned, timestamped envelope of exported reflections."""
    version: int = BACKUP_VERSION
    exported_at: str = ""
    reflections: list[BackupRecord] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "version": self.version,
            "exportedAt": self.exported_at,
            "reflections": [r.to_dict() for r in self.reflections],
        }


PayloadLike = Union[BackupPayload, Mapping, Sequence]


def export_backup(conn: sqlite3.Connection) -> BackupPayload:
    """Export all reflections, newest first."""
    records = [
        BackupRecord(day_key=r.day_key, date=r.date, verse=r.verse, text=r.text)
        for r in core.get_reflections(conn)
    ]
    return BackupPayload(
        version=BACKUP_VERSION,
        exported_at=datetime.now(timezone.utc).isoformat(),
        reflections=records,
    )


def _records_of(payload: Any) -> list:
    """Extract the raw record list, or raise BackupValidationError."""
    if isinstance(payload, BackupPayload):
        return [r.to_dict() for r in payload.reflections]

    if isinstance(payload, Mapping):
        records = payload.get("reflections")
    else:
        # Legacy format: a bare array of reflections
        records = payload

    if isinstance(records, (str, bytes)) or not isinstance(records, Sequence):
        raise BackupValidationError(
            "Invalid backup: expected a 'reflections' list of reflection records"
        )
    return list(records)


def _normalize_record(raw: Any) -> Optional[BackupRecord]:
    """Turn a raw record into a BackupRecord, or None if it is malformed.

    The day key is always derived from ``date``; a supplied ``dayKey`` is
    ignored so one calendar day maps to exactly one key.
    """
    if not isinstance(raw, Mapping):
        return None
    for name in REQUIRED_RECORD_FIELDS:
        if not isinstance(raw.get(name), str):
            return None

    try:
        day_key, _ = core.parse_reflection_date(raw["date"])
    except (TypeError, ValueError):
        return None

    supplied = raw.get("dayKey")
    if isinstance(supplied, str) and supplied.strip() and supplied.strip() != day_key:
        logger.debug("Backup dayKey %r does not match date %r; using %s", supplied, raw["date"], day_key)

    return BackupRecord(
        day_key=day_key,
        date=raw["date"],
        verse=raw["verse"],
        text=raw["text"],
    )


def import_backup(conn: sqlite3.Connection, payload: PayloadLike) -> int:
    """Merge a backup into the store.

    Args:
        conn: Store connection.
        payload: A BackupPayload, a mapping with a 'reflections' list, or a
            bare list of reflection records.

    Returns:
        Total number of reflections after the import.

    Raises:
        BackupValidationError: The payload is not a reflection list; nothing
            is written.
    """
    raw_records = _records_of(payload)

    records = []
    for raw in raw_records:
        record = _normalize_record(raw)
        if record is not None:
            records.append(record)

    skipped = len(raw_records) - len(records)
    if skipped:
        logger.info("Skipped %d malformed backup record(s)", skipped)

    with transaction(conn):
        for record in records:
            core.upsert_reflection(conn, record.day_key, record.date, record.verse, record.text)

    return core.count_reflections(conn)


def write_backup_file(payload: BackupPayload, path: Path) -> Path:
    """Write a backup as pretty JSON, atomically."""
    data = json.dumps(payload.to_dict(), ensure_ascii=False, indent=2)
    return atomic_write_bytes(Path(path), data.encode("utf-8"))


def read_backup_file(path: Path) -> Any:
    """Load a backup file's JSON; parse errors become BackupValidationError."""
    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise BackupValidationError(f"Invalid backup file {path}: {e}") from e
