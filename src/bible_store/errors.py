"""Error types raised by the store manager."""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Sequence


class StoreError(Exception):
    """Base class for all store errors."""


class BootstrapError(StoreError):
    """Initialization cannot complete and will not be retried."""


class AssetNotFoundError(BootstrapError):
    """No bundled content asset exists at any candidate location."""

    def __init__(self, candidates: Sequence[Path]):
        self.candidates = list(candidates)
        tried = ", ".join(str(p) for p in self.candidates) or "(none)"
        super().__init__(f"Bundled content database not found. Tried: {tried}")


class StoreOpenError(BootstrapError):
    """The writable store could not be opened for a non-corruption reason."""


class StoreCorruptionError(StoreError):
    """The writable store failed validation with a known corruption signature."""

    def __init__(self, message: str, path: Optional[Path] = None):
        self.path = path
        super().__init__(message)


class StoreNotReadyError(StoreError):
    """An operation was attempted on a store whose initialization failed."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(reason)


class BackupValidationError(StoreError, ValueError):
    """A backup payload does not have the expected shape."""
