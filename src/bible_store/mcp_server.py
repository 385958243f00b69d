"""MCP server for bible-store."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Optional

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from . import core
from .backup import BackupPayload
from .config import get_config
from .manager import StoreManager
from .search import SearchHit

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("bible-store-mcp")

# Create MCP server
server = Server("bible-store")

_manager: Optional[StoreManager] = None


def get_manager() -> StoreManager:
    """Get the process-wide store manager."""
    global _manager
    if _manager is None:
        _manager = StoreManager(get_config())
    return _manager


def set_manager(manager: Optional[StoreManager]) -> None:
    """Replace the process-wide store manager (used by tests)."""
    global _manager
    _manager = manager


def _translation_to_dict(t: core.Translation) -> dict:
    return {"id": t.id, "code": t.code, "name": t.name}


def _book_to_dict(b: core.Book) -> dict:
    return {"id": b.id, "code": b.code, "name": b.name, "orderIndex": b.order_index}


def _verse_to_dict(v: core.Verse) -> dict:
    return {
        "id": v.id,
        "bookCode": v.book_code,
        "bookName": v.book_name,
        "chapter": v.chapter,
        "verse": v.verse,
        "text": v.text,
        "color": v.color,
    }


def _hit_to_dict(h: SearchHit) -> dict:
    return {
        "id": h.id,
        "bookCode": h.book_code,
        "bookName": h.book_name,
        "chapter": h.chapter,
        "verse": h.verse,
        "text": h.text,
    }


def _highlight_to_dict(h: core.Highlight) -> dict:
    return {
        "id": h.id,
        "verseId": h.verse_id,
        "color": h.color,
        "createdAt": h.created_at,
        "topicId": h.topic_id,
        "topicName": h.topic_name,
        "text": h.text,
        "chapter": h.chapter,
        "verse": h.verse,
        "bookId": h.book_id,
        "bookName": h.book_name,
        "bookCode": h.book_code,
    }


def _topic_to_dict(t: core.Topic) -> dict:
    return {"id": t.id, "name": t.name, "color": t.color, "createdAt": t.created_at}


def _reflection_to_dict(r: core.Reflection) -> dict:
    return {
        "id": r.id,
        "dayKey": r.day_key,
        "date": r.date,
        "verse": r.verse,
        "text": r.text,
        "updatedAt": r.updated_at,
    }


def _schema(properties: Optional[dict] = None, required: Optional[list[str]] = None) -> dict:
    return {
        "type": "object",
        "properties": properties or {},
        "required": required or [],
    }


_INT = {"type": "integer"}
_STR = {"type": "string"}


@server.list_tools()
async def list_tools() -> list[Tool]:
    """List available tools."""
    return [
        Tool(
            name="get_status",
            description="Report whether the store is ready, the recorded failure reason, and its path. Never waits.",
            inputSchema=_schema(),
        ),
        Tool(
            name="wait_until_ready",
            description="Wait until store initialization has finished, then report status.",
            inputSchema=_schema(),
        ),
        Tool(
            name="get_translations",
            description="List available Bible translations.",
            inputSchema=_schema(),
        ),
        Tool(
            name="get_books",
            description="List books in canonical order.",
            inputSchema=_schema(),
        ),
        Tool(
            name="get_verses",
            description="Get the verses of a chapter, with highlight colours.",
            inputSchema=_schema(
                {"translation_id": _INT, "book_id": _INT, "chapter": _INT},
                ["translation_id", "book_id", "chapter"],
            ),
        ),
        Tool(
            name="search_verses",
            description="Search verse text and book names within a translation.",
            inputSchema=_schema(
                {"query": _STR, "translation_id": _INT, "limit": {"type": "integer", "default": 50}},
                ["query", "translation_id"],
            ),
        ),
        Tool(
            name="get_chapter_count",
            description="Number of chapters in a book for a translation (0 if unknown).",
            inputSchema=_schema({"book_id": _INT, "translation_id": _INT}, ["book_id", "translation_id"]),
        ),
        Tool(
            name="toggle_highlight",
            description="Highlight a verse; repeating the same colour and topic clears it.",
            inputSchema=_schema(
                {"verse_id": _INT, "color": _STR, "topic_id": _INT},
                ["verse_id", "color"],
            ),
        ),
        Tool(
            name="get_highlights",
            description="List highlights with verse and topic details, newest first.",
            inputSchema=_schema(),
        ),
        Tool(
            name="get_topics",
            description="List topics.",
            inputSchema=_schema(),
        ),
        Tool(
            name="create_topic",
            description="Create a topic, or return the existing one with the same name.",
            inputSchema=_schema({"name": _STR, "color": _STR}, ["name"]),
        ),
        Tool(
            name="get_reflections",
            description="List reflections, newest first.",
            inputSchema=_schema(),
        ),
        Tool(
            name="save_reflection",
            description="Save the reflection for the calendar day of 'date' (ISO 8601), replacing any earlier one that day.",
            inputSchema=_schema({"date": _STR, "verse": _STR, "text": _STR}, ["date", "verse", "text"]),
        ),
        Tool(
            name="delete_reflection",
            description="Delete a reflection by ID.",
            inputSchema=_schema({"id": _INT}, ["id"]),
        ),
        Tool(
            name="export_backup",
            description="Export all reflections as a versioned backup payload.",
            inputSchema=_schema(),
        ),
        Tool(
            name="import_backup",
            description="Merge a backup payload into the store. Returns the reflection count.",
            inputSchema=_schema({"payload": {"type": ["object", "array"]}}, ["payload"]),
        ),
    ]


def _json(data: Any) -> list[TextContent]:
    return [TextContent(type="text", text=json.dumps(data, indent=2, ensure_ascii=False))]


async def dispatch(manager: StoreManager, name: str, arguments: dict) -> Any:
    """Run one request against the manager and return JSON-ready data."""
    if name == "get_status":
        return manager.get_status().to_dict()

    elif name == "wait_until_ready":
        status = await manager.wait_until_ready()
        return status.to_dict()

    elif name == "get_translations":
        return [_translation_to_dict(t) for t in await manager.get_translations()]

    elif name == "get_books":
        return [_book_to_dict(b) for b in await manager.get_books()]

    elif name == "get_verses":
        verses = await manager.get_verses(
            arguments["translation_id"], arguments["book_id"], arguments["chapter"]
        )
        return [_verse_to_dict(v) for v in verses]

    elif name == "search_verses":
        hits = await manager.search_verses(
            arguments["query"], arguments["translation_id"], arguments.get("limit")
        )
        return [_hit_to_dict(h) for h in hits]

    elif name == "get_chapter_count":
        return await manager.get_chapter_count(arguments["book_id"], arguments["translation_id"])

    elif name == "toggle_highlight":
        return await manager.toggle_highlight(
            arguments["verse_id"], arguments["color"], arguments.get("topic_id")
        )

    elif name == "get_highlights":
        return [_highlight_to_dict(h) for h in await manager.get_highlights()]

    elif name == "get_topics":
        return [_topic_to_dict(t) for t in await manager.get_topics()]

    elif name == "create_topic":
        return await manager.create_topic(arguments["name"], arguments.get("color"))

    elif name == "get_reflections":
        return [_reflection_to_dict(r) for r in await manager.get_reflections()]

    elif name == "save_reflection":
        reflection = await manager.save_reflection(
            arguments["date"], arguments["verse"], arguments["text"]
        )
        return _reflection_to_dict(reflection)

    elif name == "delete_reflection":
        await manager.delete_reflection(arguments["id"])
        return None

    elif name == "export_backup":
        payload: BackupPayload = await manager.export_backup()
        return payload.to_dict()

    elif name == "import_backup":
        return await manager.import_backup(arguments["payload"])

    raise KeyError(f"Unknown tool: {name}")


@server.call_tool()
async def call_tool(name: str, arguments: dict) -> list[TextContent]:
    """Handle tool calls."""
    try:
        return _json(await dispatch(get_manager(), name, arguments or {}))
    except KeyError as e:
        if name not in {tool.name for tool in await list_tools()}:
            return [TextContent(type="text", text=f"Unknown tool: {name}")]
        logger.exception(f"Error in tool {name}")
        return [TextContent(type="text", text=f"Error: missing argument {e}")]
    except Exception as e:
        logger.exception(f"Error in tool {name}")
        return [TextContent(type="text", text=f"Error: {str(e)}")]


async def main():
    """Run the MCP server."""
    manager = get_manager()
    # Initialization proceeds in the background; requests wait on readiness
    manager.start()
    logger.info(f"Bible Store MCP server started (db: {manager.config.db_path})")

    try:
        async with stdio_server() as (read_stream, write_stream):
            await server.run(
                read_stream,
                write_stream,
                server.create_initialization_options(),
            )
    finally:
        manager.close()


def run():
    """Entry point for the MCP server."""
    asyncio.run(main())


if __name__ == "__main__":
    run()
