"""Tests for configuration loading and saving."""

from __future__ import annotations

from pathlib import Path

import pytest

from bible_store.config import (
    DEFAULT_CONFIG_PATH,
    DEFAULT_DATA_DIR,
    Config,
    SearchConfig,
    default_config_path,
    get_config,
    reload_config,
)


class TestDefaults:
    """Test default configuration values."""

    def test_defaults(self):
        """Test a bare Config uses the documented defaults."""
        config = Config()

        assert config.data_dir == DEFAULT_DATA_DIR
        assert config.db_filename == "bible.db"
        assert config.mode == "packaged"
        assert config.asset_paths == []
        assert config.search.default_limit == 50
        assert config.db_path == DEFAULT_DATA_DIR / "bible.db"

    def test_env_selects_development(self, monkeypatch):
        """Test BIBLE_STORE_ENV=development switches the default mode."""
        monkeypatch.setenv("BIBLE_STORE_ENV", "Development")

        config = Config()

        assert config.mode == "development"
        assert config.is_development

    def test_unknown_env_value_is_packaged(self, monkeypatch):
        """Test any other BIBLE_STORE_ENV value leaves packaged mode."""
        monkeypatch.setenv("BIBLE_STORE_ENV", "production")

        assert Config().mode == "packaged"

    def test_invalid_mode_rejected(self):
        """Test an unknown mode raises ValueError."""
        with pytest.raises(ValueError, match="Unknown run mode"):
            Config(mode="staging")

    def test_paths_are_expanded(self):
        """Test string paths become expanded Path objects."""
        config = Config(data_dir="~/somewhere", asset_paths=["~/a.db"])

        assert config.data_dir == Path.home() / "somewhere"
        assert config.asset_paths == [Path.home() / "a.db"]


class TestLoadSave:
    """Test YAML persistence."""

    def test_missing_file_gives_defaults(self, temp_dir):
        """Test loading a nonexistent file returns defaults."""
        config = Config.load(temp_dir / "nope.yaml")

        assert config.data_dir == DEFAULT_DATA_DIR

    def test_save_and_load(self, temp_dir):
        """Test a saved config loads back with the same values."""
        path = temp_dir / "config.yaml"
        original = Config(
            data_dir=temp_dir / "data",
            db_filename="store.db",
            mode="development",
            asset_paths=[temp_dir / "asset.db"],
            search=SearchConfig(default_limit=10),
            log_level="DEBUG",
        )

        original.save(path)
        loaded = Config.load(path)

        assert loaded.data_dir == temp_dir / "data"
        assert loaded.db_filename == "store.db"
        assert loaded.mode == "development"
        assert loaded.asset_paths == [temp_dir / "asset.db"]
        assert loaded.search.default_limit == 10
        assert loaded.log_level == "DEBUG"

    def test_partial_file(self, temp_dir):
        """Test keys missing from the file fall back to defaults."""
        path = temp_dir / "config.yaml"
        path.write_text("search:\n  default_limit: 5\n")

        config = Config.load(path)

        assert config.search.default_limit == 5
        assert config.db_filename == "bible.db"
        assert config.mode == "packaged"

    def test_keys_without_values(self, temp_dir):
        """Test keys present with no value load as defaults."""
        path = temp_dir / "config.yaml"
        path.write_text("search:\nasset_paths:\ndb_filename:\ndata_dir:\nlog_level:\n")

        config = Config.load(path)

        assert config.search.default_limit == 50
        assert config.asset_paths == []
        assert config.db_filename == "bible.db"
        assert config.data_dir == DEFAULT_DATA_DIR
        assert config.log_level == "WARNING"

    def test_empty_file(self, temp_dir):
        """Test an empty YAML file loads as defaults."""
        path = temp_dir / "config.yaml"
        path.write_text("")

        assert Config.load(path).search.default_limit == 50


class TestGlobalConfig:
    """Test the cached global configuration."""

    def test_config_path_env_override(self, monkeypatch, temp_dir):
        """Test BIBLE_STORE_CONFIG overrides the default config location."""
        assert default_config_path() == DEFAULT_CONFIG_PATH

        monkeypatch.setenv("BIBLE_STORE_CONFIG", str(temp_dir / "custom.yaml"))

        assert default_config_path() == temp_dir / "custom.yaml"

    def test_reload_replaces_cached_config(self, temp_dir):
        """Test reload_config swaps the instance get_config returns."""
        path = temp_dir / "config.yaml"
        Config(data_dir=temp_dir / "data").save(path)

        reloaded = reload_config(path)

        assert get_config() is reloaded
        assert get_config().data_dir == temp_dir / "data"
