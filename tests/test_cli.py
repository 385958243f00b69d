"""Tests for the bible-store command-line interface."""

from __future__ import annotations

import json

import pytest
from click.testing import CliRunner

from bible_store.cli import main
from bible_store.config import Config

from helpers import PSALM_23_1


@pytest.fixture
def config_file(temp_dir, asset_path, monkeypatch):
    """Write a config file for an isolated store and point the CLI at it."""
    path = temp_dir / "config.yaml"
    Config(data_dir=temp_dir / "data", asset_paths=[asset_path]).save(path)
    monkeypatch.setenv("BIBLE_STORE_CONFIG", str(path))
    return path


@pytest.fixture
def invoke(config_file):
    """Run the CLI against the isolated store."""
    runner = CliRunner()

    def _invoke(*args):
        return runner.invoke(main, ["--config", str(config_file), *args])

    return _invoke


class TestAdmin:
    """Test admin commands."""

    def test_init(self, invoke, temp_dir):
        """Test init creates the store and reports where."""
        result = invoke("admin", "init")

        assert result.exit_code == 0
        assert "Initialized bible-store" in result.output
        assert "Schema version: 3" in result.output
        assert (temp_dir / "data" / "bible.db").exists()

    def test_init_missing_asset(self, temp_dir):
        """Test a missing asset exits with the failure reason."""
        path = temp_dir / "config.yaml"
        Config(data_dir=temp_dir / "data", asset_paths=[temp_dir / "missing.db"]).save(path)

        result = CliRunner().invoke(main, ["--config", str(path), "admin", "init"])

        assert result.exit_code == 1
        assert "store unavailable" in result.output
        assert "Bundled content database not found" in result.output

    def test_status_json(self, invoke):
        """Test status reports counts and index presence as JSON."""
        result = invoke("admin", "status", "--json")

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["counts"]["verses"] == 10
        assert data["search_index"] is True
        assert data["quarantined"] == []

    def test_verify_reports_gaps(self, invoke):
        """Test verify lists missing verses and exits non-zero."""
        result = invoke("admin", "verify", "-t", "1")

        assert result.exit_code == 1
        assert "Psalms 23: missing verse(s) 3" in result.output

    def test_verify_clean_book(self, invoke):
        """Test verify succeeds for a book without gaps."""
        result = invoke("admin", "verify", "-t", "1", "-b", "1")

        assert result.exit_code == 0
        assert "No gaps found" in result.output

    def test_reindex(self, invoke):
        """Test reindex reports the number of verses."""
        result = invoke("admin", "reindex")

        assert result.exit_code == 0
        assert "Indexed 10 verses." in result.output

    def test_export_and_import(self, invoke, temp_dir):
        """Test exporting reflections and importing them back."""
        invoke("notes", "reflect", "Psalm 23:1", "Rest", "--date", "2024-03-01T08:00:00")
        backup_path = temp_dir / "backup.json"

        exported = invoke("admin", "export", str(backup_path))
        imported = invoke("admin", "import", str(backup_path))

        assert exported.exit_code == 0
        assert "Exported 1 reflection(s)" in exported.output
        assert imported.exit_code == 0
        assert "1 reflection(s) in store" in imported.output

    def test_import_invalid(self, invoke, temp_dir):
        """Test importing an invalid backup exits with an error."""
        bad = temp_dir / "bad.json"
        bad.write_text('{"reflections": "nope"}')

        result = invoke("admin", "import", str(bad))

        assert result.exit_code == 1
        assert "Invalid backup" in result.output


class TestRead:
    """Test read commands."""

    def test_translations(self, invoke):
        """Test translations are listed without samples."""
        result = invoke("read", "translations")

        assert result.exit_code == 0
        assert "King James Version" in result.output
        assert "Sample" not in result.output

    def test_books(self, invoke):
        """Test books are listed."""
        result = invoke("read", "books")

        assert result.exit_code == 0
        assert "Genesis" in result.output
        assert "Sample Book" not in result.output

    def test_chapter(self, invoke):
        """Test a chapter prints its heading and verses."""
        result = invoke("read", "chapter", "1", "2", "23")

        assert result.exit_code == 0
        assert "Psalms 23 (of 23)" in result.output
        assert "The LORD is my shepherd" in result.output

    def test_search_json(self, invoke):
        """Test search output as JSON names the serving layer."""
        result = invoke("read", "search", "shepherd", "--json")

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["layer"] == "full_text"
        assert data["results"][0]["id"] == PSALM_23_1

    def test_search_no_results(self, invoke):
        """Test a search without matches says so."""
        result = invoke("read", "search", "zebra")

        assert result.exit_code == 0
        assert "No results found." in result.output


class TestNotes:
    """Test notes commands."""

    def test_highlight_toggle(self, invoke):
        """Test highlighting twice with the same colour clears it."""
        first = invoke("notes", "highlight", str(PSALM_23_1), "yellow")
        second = invoke("notes", "highlight", str(PSALM_23_1), "yellow")

        assert f"Highlighted verse {PSALM_23_1} (yellow)" in first.output
        assert f"Cleared highlight on verse {PSALM_23_1}" in second.output

    def test_highlights_list(self, invoke):
        """Test highlights show their reference and topic."""
        invoke("notes", "add-topic", "Comfort")
        invoke("notes", "highlight", str(PSALM_23_1), "green", "--topic", "1")

        result = invoke("notes", "highlights")

        assert result.exit_code == 0
        assert "Psalms 23:1 (green)" in result.output
        assert "topic: Comfort" in result.output

    def test_topics(self, invoke):
        """Test adding and listing topics."""
        added = invoke("notes", "add-topic", "Grace", "--color", "gold")
        listed = invoke("notes", "topics")

        assert "Topic 'Grace' has ID: 1" in added.output
        assert "[1] Grace (gold)" in listed.output

    def test_reflect_and_list(self, invoke):
        """Test saving and listing a reflection."""
        saved = invoke("notes", "reflect", "John 3:16", "Loved", "--date", "2024-03-01T08:00:00")
        listed = invoke("notes", "reflections", "-v")

        assert saved.exit_code == 0
        assert "Saved reflection for 2024-03-01" in saved.output
        assert "2024-03-01 - John 3:16" in listed.output
        assert "Loved" in listed.output

    def test_reflect_bad_date(self, invoke):
        """Test an invalid date is a usage error."""
        result = invoke("notes", "reflect", "John 3:16", "Text", "--date", "someday")

        assert result.exit_code == 2

    def test_delete_reflection(self, invoke):
        """Test deleting a reflection."""
        invoke("notes", "reflect", "John 3:16", "Brief", "--date", "2024-03-01")

        deleted = invoke("notes", "delete-reflection", "1")
        listed = invoke("notes", "reflections")

        assert deleted.exit_code == 0
        assert "No reflections." in listed.output
