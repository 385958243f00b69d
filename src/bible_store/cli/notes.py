"""Notes CLI commands for highlights, topics and reflections."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

import click

from .. import core
from .display import format_highlight, format_reflection, format_topic
from .utils import store_connection


@click.group()
def notes():
    """Highlights, topics and daily reflections."""
    pass


@notes.command()
@click.argument("verse_id", type=int)
@click.argument("color")
@click.option("--topic", "topic_id", type=int, help="Topic ID to file the highlight under")
def highlight(verse_id: int, color: str, topic_id: Optional[int]):
    """Toggle a highlight. Repeating the same colour and topic clears it."""
    with store_connection() as conn:
        result = core.toggle_highlight(conn, verse_id, color, topic_id)

    if result is None:
        click.echo(f"Cleared highlight on verse {verse_id}")
    else:
        click.echo(f"Highlighted verse {verse_id} ({result})")


@notes.command()
def highlights():
    """List highlights, newest first."""
    with store_connection() as conn:
        items = core.get_highlights(conn)

    if not items:
        click.echo("No highlights.")
        return

    for h in items:
        click.echo(format_highlight(h))
        click.echo()


@notes.command()
def topics():
    """List topics."""
    with store_connection() as conn:
        items = core.get_topics(conn)

    if not items:
        click.echo("No topics.")
        return

    for t in items:
        click.echo(format_topic(t))


@notes.command("add-topic")
@click.argument("name")
@click.option("--color", "-c", help="Topic colour")
def add_topic(name: str, color: Optional[str]):
    """Create a topic (returns the existing one if the name is taken)."""
    with store_connection() as conn:
        topic_id = core.create_topic(conn, name, color)
    click.echo(f"Topic '{name}' has ID: {topic_id}")


@notes.command()
@click.argument("verse")
@click.argument("text")
@click.option("--date", "date_str", help="ISO date or timestamp (default: now)")
def reflect(verse: str, text: str, date_str: Optional[str]):
    """Save today's reflection on VERSE (replaces an earlier one that day)."""
    when = date_str if date_str else datetime.now().astimezone()
    try:
        with store_connection() as conn:
            reflection = core.save_reflection(conn, when, verse, text)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--date")

    click.echo(f"Saved reflection for {reflection.day_key} (ID: {reflection.id})")


@notes.command()
@click.option("--verbose", "-v", is_flag=True, help="Show full text")
def reflections(verbose: bool):
    """List reflections, newest first."""
    with store_connection() as conn:
        items = core.get_reflections(conn)

    if not items:
        click.echo("No reflections.")
        return

    for r in items:
        click.echo(format_reflection(r, verbose))
        click.echo()


@notes.command("delete-reflection")
@click.argument("reflection_id", type=int)
def delete_reflection(reflection_id: int):
    """Delete a reflection by ID."""
    with store_connection() as conn:
        core.delete_reflection(conn, reflection_id)
    click.echo(f"Deleted reflection {reflection_id}")
