"""Centralized pytest fixtures and configuration.

This module provides shared fixtures for all tests, including:
- Environment isolation (no user config, env overrides or global state)
- A small bundled content asset with a full-text index
- Store configurations and open connections in isolated temp directories
"""

from __future__ import annotations

import tempfile
from pathlib import Path
from typing import TYPE_CHECKING

import pytest

from bible_store import config as config_module
from bible_store.config import Config, SearchConfig
from bible_store.db import bootstrap

from helpers import build_asset

if TYPE_CHECKING:
    import sqlite3
    from collections.abc import Generator


# -----------------------------------------------------------------------------
# Environment Isolation
# -----------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Clear env overrides and the cached global config for every test."""
    for name in ("BIBLE_STORE_ENV", "BIBLE_STORE_ASSET", "BIBLE_STORE_CONFIG"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(config_module, "_config", None)


# -----------------------------------------------------------------------------
# Store Configuration Fixtures
# -----------------------------------------------------------------------------


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files.

    The directory is automatically cleaned up after the test.
    """
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def asset_path(temp_dir: Path) -> Path:
    """Build the bundled content asset outside the data directory."""
    return build_asset(temp_dir / "assets" / "bible.db")


@pytest.fixture
def temp_config(temp_dir: Path, asset_path: Path) -> Config:
    """Create a packaged-mode configuration for testing.

    This is the standard fixture for tests that need store access.
    """
    return Config(
        data_dir=temp_dir / "data",
        asset_paths=[asset_path],
        mode="packaged",
        search=SearchConfig(),
    )


@pytest.fixture
def conn(temp_config: Config) -> Generator[sqlite3.Connection, None, None]:
    """Bootstrap the store and yield its open connection."""
    boot = bootstrap(temp_config)
    try:
        yield boot.conn
    finally:
        boot.conn.close()
