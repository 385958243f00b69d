"""Locations of the bundled content asset and the writable store.

Asset resolution order:
  1. ``asset_paths`` from the configuration, in order
  2. BIBLE_STORE_ASSET env var (full path to a .db file)
  3. The run-mode default:
     - development: ``<repo>/assets/bible.db``
     - packaged: ``bible_store/assets/bible.db`` inside the installed package,
       then ``<sys.prefix>/share/bible-store/bible.db``

The first candidate that exists wins. The writable store always lives at
``Config.db_path``.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from .config import Config
from .errors import AssetNotFoundError

ASSET_FILENAME = "bible.db"

_PACKAGE_DIR = Path(__file__).resolve().parent
# src/bible_store -> src -> repository root
_REPO_ROOT = _PACKAGE_DIR.parent.parent


def asset_candidates(config: Config) -> list[Path]:
    """Ordered list of places the bundled asset may live."""
    candidates = list(config.asset_paths)

    env = os.environ.get("BIBLE_STORE_ASSET")
    if env:
        candidates.append(Path(env).expanduser())

    if config.is_development:
        candidates.append(_REPO_ROOT / "assets" / ASSET_FILENAME)
    else:
        candidates.append(_PACKAGE_DIR / "assets" / ASSET_FILENAME)
        candidates.append(Path(sys.prefix) / "share" / "bible-store" / ASSET_FILENAME)

    # Drop duplicates, keep order
    seen = set()
    ordered = []
    for path in candidates:
        if path not in seen:
            seen.add(path)
            ordered.append(path)
    return ordered


def resolve_asset(config: Config) -> Path:
    """Return the first existing bundled asset, or raise AssetNotFoundError."""
    candidates = asset_candidates(config)
    for path in candidates:
        if path.is_file():
            return path
    raise AssetNotFoundError(candidates)


def destination_path(config: Config) -> Path:
    return config.db_path


def side_files(path: Path) -> list[Path]:
    """SQLite journal files that belong to a database file."""
    return [path.with_name(path.name + suffix) for suffix in ("-wal", "-shm", "-journal")]
