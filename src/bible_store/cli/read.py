"""Read CLI commands for browsing and searching bundled content."""

from __future__ import annotations

from typing import Optional

import click

from .. import core
from ..config import get_config
from ..search import SearchLayer, run_search
from .display import format_search_hit, format_verse
from .utils import echo_json, store_connection


@click.group()
def read():
    """Browse and search the bundled content."""
    pass


@read.command()
def translations():
    """List translations."""
    with store_connection() as conn:
        items = core.get_translations(conn)

    for t in items:
        click.echo(f"[{t.id}] {t.code}  {t.name}")


@read.command()
def books():
    """List books in canonical order."""
    with store_connection() as conn:
        items = core.get_books(conn)

    for b in items:
        click.echo(f"[{b.id}] {b.code:<5} {b.name}")


@read.command()
@click.argument("translation_id", type=int)
@click.argument("book_id", type=int)
@click.argument("chapter", type=int)
def chapter(translation_id: int, book_id: int, chapter: int):
    """Show one chapter, marking highlighted verses."""
    with store_connection() as conn:
        verses = core.get_verses(conn, translation_id, book_id, chapter)
        total = core.get_chapter_count(conn, book_id, translation_id)

    if not verses:
        click.echo("No verses found.")
        return

    click.echo(f"=== {verses[0].book_name} {chapter} (of {total}) ===")
    click.echo()
    for verse in verses:
        click.echo(format_verse(verse))


@read.command()
@click.argument("query")
@click.option("--translation", "-t", "translation_id", type=int, default=1, help="Translation ID (default: 1)")
@click.option("--limit", "-n", type=int, help="Maximum results (default from config)")
@click.option("--json", "json_output", is_flag=True, help="Machine-readable JSON output")
def search(query: str, translation_id: int, limit: Optional[int], json_output: bool):
    """Search verse text and book names."""
    if limit is None:
        limit = get_config().search.default_limit

    with store_connection() as conn:
        outcome = run_search(conn, query, translation_id, limit)

    if json_output:
        echo_json({
            "layer": outcome.layer.value,
            "results": [
                {
                    "id": h.id,
                    "bookCode": h.book_code,
                    "bookName": h.book_name,
                    "chapter": h.chapter,
                    "verse": h.verse,
                    "text": h.text,
                }
                for h in outcome.hits
            ],
        })
        return

    if not outcome.hits:
        click.echo("No results found.")
        return

    if outcome.layer is SearchLayer.SUBSTRING:
        click.secho("(full-text index unavailable; showing substring matches)", dim=True)

    click.echo(f"=== Results ({len(outcome.hits)}) ===")
    click.echo()
    for hit in outcome.hits:
        click.echo(format_search_hit(hit))
        click.echo()
