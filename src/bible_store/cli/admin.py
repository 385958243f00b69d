"""Admin CLI commands for store setup, diagnostics and backups."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

import click

from .. import core
from ..backup import export_backup, import_backup, read_backup_file, write_backup_file
from ..config import default_config_path, get_config
from ..db import get_schema_version, has_search_index, list_quarantined, rebuild_search_index
from ..errors import BackupValidationError
from ..paths import asset_candidates
from .display import format_chapter_gap
from .utils import echo_json, open_bootstrap, store_connection


@click.group()
def admin():
    """Store setup, diagnostics, backup and restore."""
    pass


@admin.command()
def init():
    """Create or repair the writable store from the bundled database."""
    config = get_config()

    with open_bootstrap() as boot:
        version = get_schema_version(boot.conn)

    # Save default config if it doesn't exist
    config_path = default_config_path()
    if not config_path.exists():
        config.save(config_path)

    click.echo(f"Initialized bible-store at {config.data_dir}")
    click.echo(f"  Database: {boot.path}")
    click.echo(f"  Bundled asset: {boot.asset}")
    click.echo(f"  Schema version: {version}")
    if boot.copied:
        click.echo("  Copied fresh content from the bundled asset")
    if boot.recovered:
        click.secho(f"  Recovered from corruption; damaged copy kept at {boot.quarantined}", fg="yellow")


@admin.command()
@click.option("--json", "json_output", is_flag=True, help="Machine-readable JSON output")
def status(json_output: bool):
    """Show store location, contents and quarantined copies."""
    config = get_config()

    with store_connection() as conn:
        counts = core.store_counts(conn)
        version = get_schema_version(conn)
        indexed = has_search_index(conn)

    quarantined = list_quarantined(config)

    if json_output:
        echo_json({
            "path": str(config.db_path),
            "mode": config.mode,
            "schema_version": version,
            "search_index": indexed,
            "counts": counts,
            "quarantined": [str(p) for p in quarantined],
        })
        return

    click.echo(f"Database: {config.db_path} ({config.mode} mode)")
    click.echo(f"Schema version: {version}")
    click.echo(f"Full-text index: {'present' if indexed else 'missing (substring search only)'}")
    click.echo()
    for table, count in counts.items():
        click.echo(f"  {table:<13} {count}")

    if quarantined:
        click.echo()
        click.echo(f"Quarantined copies ({len(quarantined)}):")
        for path in quarantined:
            click.echo(f"  {path}")


@admin.command()
def assets():
    """List the places searched for the bundled database."""
    for path in asset_candidates(get_config()):
        mark = "found" if path.is_file() else "missing"
        click.echo(f"  [{mark}] {path}")


@admin.command()
def reindex():
    """Rebuild the full-text search index."""
    with store_connection() as conn:
        count = rebuild_search_index(conn)
    click.echo(f"Indexed {count} verses.")


@admin.command()
@click.option("--translation", "-t", "translation_id", type=int, required=True, help="Translation ID")
@click.option("--book", "-b", "book_id", type=int, help="Only check this book ID")
def verify(translation_id: int, book_id: Optional[int]):
    """Check chapters for gaps in verse numbering."""
    with store_connection() as conn:
        gaps = core.verify_chapters(conn, translation_id, book_id)

    if not gaps:
        click.echo("No gaps found in verse sequence.")
        return

    click.echo(f"Gaps found in {len(gaps)} chapter(s):")
    for gap in gaps:
        click.echo(f"  {format_chapter_gap(gap)}")
    sys.exit(1)


@admin.command("export")
@click.argument("output", type=click.Path(dir_okay=False, path_type=Path))
def export_cmd(output: Path):
    """Export reflections to a JSON backup file."""
    with store_connection() as conn:
        payload = export_backup(conn)

    write_backup_file(payload, output)
    click.echo(f"Exported {len(payload.reflections)} reflection(s) to {output}")


@admin.command("import")
@click.argument("source", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def import_cmd(source: Path):
    """Merge reflections from a JSON backup file."""
    try:
        data = read_backup_file(source)
        with store_connection() as conn:
            total = import_backup(conn, data)
    except BackupValidationError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    click.echo(f"Import complete. {total} reflection(s) in store.")
