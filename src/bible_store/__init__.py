"""Bible Store - Local persistent store for Bible content, highlights and reflections."""

from importlib.metadata import version, PackageNotFoundError

_pkg = __package__.split('.')[0]

try:
    __version__: str = version(_pkg)
except PackageNotFoundError:
    __version__: str = "0.0.1-dev"  # fallback for running directly from source

from .core import (
    # Content
    get_translations,
    get_books,
    get_verses,
    get_chapter_count,
    verify_chapters,
    # Highlights and topics
    toggle_highlight,
    get_highlights,
    get_topics,
    create_topic,
    # Reflections
    save_reflection,
    get_reflections,
    delete_reflection,
    # Dataclasses
    Translation,
    Book,
    Verse,
    Topic,
    Highlight,
    Reflection,
    ChapterGap,
)
from .search import search_verses, run_search, SearchHit, SearchLayer, SearchOutcome
from .backup import export_backup, import_backup, BackupPayload, BackupRecord
from .db import bootstrap, get_store
from .manager import StoreManager, StoreStatus
from .errors import (
    StoreError,
    BootstrapError,
    AssetNotFoundError,
    StoreOpenError,
    StoreCorruptionError,
    StoreNotReadyError,
    BackupValidationError,
)

__all__ = [
    # Content
    "get_translations",
    "get_books",
    "get_verses",
    "get_chapter_count",
    "verify_chapters",
    # Highlights and topics
    "toggle_highlight",
    "get_highlights",
    "get_topics",
    "create_topic",
    # Reflections
    "save_reflection",
    "get_reflections",
    "delete_reflection",
    # Search
    "search_verses",
    "run_search",
    "SearchHit",
    "SearchLayer",
    "SearchOutcome",
    # Backup
    "export_backup",
    "import_backup",
    "BackupPayload",
    "BackupRecord",
    # Lifecycle
    "bootstrap",
    "get_store",
    "StoreManager",
    "StoreStatus",
    # Dataclasses
    "Translation",
    "Book",
    "Verse",
    "Topic",
    "Highlight",
    "Reflection",
    "ChapterGap",
    # Errors
    "StoreError",
    "BootstrapError",
    "AssetNotFoundError",
    "StoreOpenError",
    "StoreCorruptionError",
    "StoreNotReadyError",
    "BackupValidationError",
]
