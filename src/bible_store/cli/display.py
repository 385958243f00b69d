"""CLI display and formatting functions."""

from __future__ import annotations

from .. import core
from ..search import SearchHit

# Reflection text preview length in list views
PREVIEW_LENGTH = 80


def format_reference(book_name: str, chapter: int, verse: int) -> str:
    return f"{book_name} {chapter}:{verse}"


def format_verse(verse: core.Verse) -> str:
    """Format a verse for chapter display, marking highlights."""
    marker = f" [{verse.color}]" if verse.color else ""
    return f"{verse.verse:>3}  {verse.text}{marker}"


def format_search_hit(hit: SearchHit) -> str:
    ref = format_reference(hit.book_name, hit.chapter, hit.verse)
    return f"[{hit.id}] {ref}\n  {hit.text}"


def format_highlight(highlight: core.Highlight) -> str:
    """Format a highlight with its verse reference and topic."""
    ref = format_reference(highlight.book_name, highlight.chapter, highlight.verse)
    lines = [f"[{highlight.verse_id}] {ref} ({highlight.color})"]
    if highlight.topic_name:
        lines.append(f"  topic: {highlight.topic_name}")
    lines.append(f"  {highlight.text}")
    return "\n".join(lines)


def format_topic(topic: core.Topic) -> str:
    color = f" ({topic.color})" if topic.color else ""
    return f"[{topic.id}] {topic.name}{color}"


def format_reflection(reflection: core.Reflection, verbose: bool = False) -> str:
    """Format a reflection; the text is truncated unless verbose."""
    lines = [f"[{reflection.id}] {reflection.day_key} - {reflection.verse}"]
    if verbose:
        lines.append(f"  saved: {reflection.date} | updated: {reflection.updated_at}")
        lines.append("")
        lines.append(reflection.text)
    else:
        preview = reflection.text[:PREVIEW_LENGTH].replace("\n", " ")
        if len(reflection.text) > PREVIEW_LENGTH:
            preview += "..."
        lines.append(f"  > {preview}")
    return "\n".join(lines)


def format_chapter_gap(gap: core.ChapterGap) -> str:
    missing = ", ".join(str(n) for n in gap.missing)
    return f"{gap.book_name} {gap.chapter}: missing verse(s) {missing}"
