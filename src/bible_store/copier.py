"""Crash-safe file copies: write a sibling temp file, then rename over the target."""

from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path

logger = logging.getLogger(__name__)

TEMP_SUFFIX = ".tmp"


def temp_path_for(destination: Path) -> Path:
    """Temp file used while writing ``destination`` (same directory, so the rename is atomic)."""
    return destination.with_name(destination.name + TEMP_SUFFIX)


def _fsync(path: Path) -> None:
    with open(path, "rb+") as f:
        os.fsync(f.fileno())


def _commit(tmp: Path, destination: Path) -> None:
    try:
        _fsync(tmp)
        os.replace(tmp, destination)
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise


def atomic_copy(source: Path, destination: Path) -> Path:
    """Copy ``source`` to ``destination`` so the destination is never partially written.

    Args:
        source: File to copy.
        destination: Target path. Parent directories are created as needed.

    Returns:
        The destination path.
    """
    source = Path(source)
    destination = Path(destination)
    destination.parent.mkdir(parents=True, exist_ok=True)

    tmp = temp_path_for(destination)
    try:
        shutil.copyfile(source, tmp)
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise
    _commit(tmp, destination)

    logger.info("Copied %s -> %s", source, destination)
    return destination


def atomic_write_bytes(destination: Path, data: bytes) -> Path:
    """Write ``data`` to ``destination`` with the same temp-then-rename sequence."""
    destination = Path(destination)
    destination.parent.mkdir(parents=True, exist_ok=True)

    tmp = temp_path_for(destination)
    try:
        tmp.write_bytes(data)
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise
    _commit(tmp, destination)
    return destination
