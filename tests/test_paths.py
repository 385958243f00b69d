"""Tests for bundled asset and writable store path resolution."""

from __future__ import annotations

import pytest

from bible_store import paths
from bible_store.config import Config
from bible_store.errors import AssetNotFoundError, BootstrapError


class TestAssetCandidates:
    """Test the ordered candidate list."""

    def test_configured_paths_come_first(self, temp_dir, monkeypatch):
        """Test configured asset paths precede env and mode defaults."""
        monkeypatch.setenv("BIBLE_STORE_ASSET", str(temp_dir / "env.db"))
        config = Config(asset_paths=[temp_dir / "a.db", temp_dir / "b.db"])

        candidates = paths.asset_candidates(config)

        assert candidates[:3] == [temp_dir / "a.db", temp_dir / "b.db", temp_dir / "env.db"]

    def test_development_default(self):
        """Test development mode looks in the repository assets directory."""
        candidates = paths.asset_candidates(Config(mode="development"))

        assert candidates[-1] == paths._REPO_ROOT / "assets" / paths.ASSET_FILENAME

    def test_packaged_defaults(self):
        """Test packaged mode looks inside the installed package."""
        candidates = paths.asset_candidates(Config(mode="packaged"))

        assert paths._PACKAGE_DIR / "assets" / paths.ASSET_FILENAME in candidates
        assert paths._REPO_ROOT / "assets" / paths.ASSET_FILENAME not in candidates

    def test_duplicates_removed(self, temp_dir, monkeypatch):
        """Test the same path listed twice appears once."""
        monkeypatch.setenv("BIBLE_STORE_ASSET", str(temp_dir / "a.db"))
        config = Config(asset_paths=[temp_dir / "a.db", temp_dir / "a.db"])

        candidates = paths.asset_candidates(config)

        assert candidates.count(temp_dir / "a.db") == 1


class TestResolveAsset:
    """Test asset resolution."""

    def test_first_existing_wins(self, temp_dir):
        """Test the first candidate that exists is returned."""
        second = temp_dir / "second.db"
        second.write_bytes(b"x")
        third = temp_dir / "third.db"
        third.write_bytes(b"y")
        config = Config(asset_paths=[temp_dir / "first.db", second, third])

        assert paths.resolve_asset(config) == second

    def test_missing_asset_names_candidates(self, temp_dir):
        """Test a missing asset raises with every location tried."""
        config = Config(asset_paths=[temp_dir / "missing.db"])

        with pytest.raises(AssetNotFoundError) as exc_info:
            paths.resolve_asset(config)

        assert isinstance(exc_info.value, BootstrapError)
        assert temp_dir / "missing.db" in exc_info.value.candidates
        assert "Bundled content database not found" in str(exc_info.value)
        assert str(temp_dir / "missing.db") in str(exc_info.value)


class TestStorePaths:
    """Test writable store locations."""

    def test_destination_is_config_db_path(self, temp_dir):
        """Test the store lives at data_dir/db_filename."""
        config = Config(data_dir=temp_dir, db_filename="store.db")

        assert paths.destination_path(config) == temp_dir / "store.db"

    def test_side_files(self, temp_dir):
        """Test the journal side files of a database path."""
        names = [p.name for p in paths.side_files(temp_dir / "bible.db")]

        assert names == ["bible.db-wal", "bible.db-shm", "bible.db-journal"]
