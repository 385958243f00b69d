"""Store lifecycle: background initialization, readiness gate and async facade.

A StoreManager owns the single writable store handle for one application
run. Initialization runs on a worker thread so the caller's event loop stays
responsive; every facade coroutine waits for it to finish first.

    manager = StoreManager(config)
    manager.start()                      # returns immediately
    status = await manager.wait_until_ready()
    verses = await manager.get_verses(1, 1, 1)
    manager.close()
"""

from __future__ import annotations

import asyncio
import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Optional

from . import backup, core, search
from .config import Config, get_config
from .db import Bootstrap, RecoveryState, bootstrap
from .errors import StoreNotReadyError
from .paths import destination_path

logger = logging.getLogger(__name__)


@dataclass
class StoreStatus:
    """Snapshot of store readiness."""
    ready: bool
    error: Optional[str]
    path: Optional[str]

    def to_dict(self) -> dict:
        return {"ready": self.ready, "error": self.error, "path": self.path}


class StoreManager:
    """Owns the writable store handle and gates access on initialization."""

    def __init__(self, config: Optional[Config] = None):
        self.config = config if config is not None else get_config()
        self._lock = threading.RLock()
        self._bootstrap_lock = threading.Lock()
        self._generation = 0
        self._reset()

    def _reset(self) -> None:
        self._conn = None
        self._path: Optional[str] = None
        self._error: Optional[str] = None
        self._state: Optional[RecoveryState] = None
        self._gate: Optional[asyncio.Event] = None
        self._task: Optional[asyncio.Task] = None
        self.last_bootstrap: Optional[Bootstrap] = None

    # --- Lifecycle ---

    @property
    def state(self) -> Optional[RecoveryState]:
        return self._state

    def start(self) -> asyncio.Task:
        """Schedule initialization in the background. Must run inside an event loop.

        Calling it again while initialization is pending or finished is a no-op.
        """
        if self._task is None:
            self._gate = asyncio.Event()
            self._path = str(destination_path(self.config))
            self._state = RecoveryState.OPENING
            self._task = asyncio.get_running_loop().create_task(
                self._initialize(self._gate, self._generation)
            )
        return self._task

    def _bootstrap(self, generation: int) -> Optional[Bootstrap]:
        # Held for the whole run: an init abandoned by close() finishes before the next one starts
        with self._bootstrap_lock:
            boot = bootstrap(self.config)
            if generation != self._generation:
                # close() ran while we were opening
                boot.conn.close()
                return None
            return boot

    async def _initialize(self, gate: asyncio.Event, generation: int) -> None:
        try:
            boot = await asyncio.to_thread(self._bootstrap, generation)
        except Exception as e:
            if generation == self._generation:
                logger.error("CRITICAL: Failed to initialize database: %s", e)
                self._error = str(e) or e.__class__.__name__
                self._state = RecoveryState.FAILED
        else:
            if boot is None:
                return
            if generation != self._generation:
                boot.conn.close()
            else:
                with self._lock:
                    self._conn = boot.conn
                    self._path = str(boot.path)
                    self._state = boot.state
                    self.last_bootstrap = boot
        finally:
            gate.set()

    def get_status(self) -> StoreStatus:
        """Synchronous readiness snapshot; safe to call at any time."""
        return StoreStatus(
            ready=self._conn is not None,
            error=self._error,
            path=self._path,
        )

    async def wait_until_ready(self) -> StoreStatus:
        """Wait for initialization to conclude (successfully or not)."""
        self.start()
        await self._gate.wait()
        return self.get_status()

    async def init(self) -> StoreStatus:
        """Start initialization and wait for it."""
        return await self.wait_until_ready()

    def close(self) -> None:
        """Release the store handle and clear all readiness state."""
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                logger.info("Closed store at %s", self._path)
            self._generation += 1
            self._reset()

    async def __aenter__(self) -> "StoreManager":
        await self.init()
        return self

    async def __aexit__(self, *exc_info) -> None:
        self.close()

    # --- Facade ---

    async def _run(self, func: Callable[..., Any], *args: Any) -> Any:
        await self.wait_until_ready()
        with self._lock:
            if self._conn is None:
                raise StoreNotReadyError(self._error or "Store is closed")
            return func(self._conn, *args)

    async def get_translations(self) -> list[core.Translation]:
        return await self._run(core.get_translations)

    async def get_books(self) -> list[core.Book]:
        return await self._run(core.get_books)

    async def get_verses(self, translation_id: int, book_id: int, chapter: int) -> list[core.Verse]:
        return await self._run(core.get_verses, translation_id, book_id, chapter)

    async def get_chapter_count(self, book_id: int, translation_id: int) -> int:
        return await self._run(core.get_chapter_count, book_id, translation_id)

    async def search_verses(
        self, query: str, translation_id: int, limit: Optional[int] = None
    ) -> list[search.SearchHit]:
        """Search verses; blank queries return [] without waiting on the store."""
        if not (query or "").strip():
            return []
        if limit is None:
            limit = self.config.search.default_limit
        return await self._run(search.search_verses, query, translation_id, limit)

    async def toggle_highlight(
        self, verse_id: int, color: str, topic_id: Optional[int] = None
    ) -> Optional[str]:
        return await self._run(core.toggle_highlight, verse_id, color, topic_id)

    async def get_highlights(self) -> list[core.Highlight]:
        return await self._run(core.get_highlights)

    async def get_topics(self) -> list[core.Topic]:
        return await self._run(core.get_topics)

    async def create_topic(self, name: str, color: Optional[str] = None) -> int:
        return await self._run(core.create_topic, name, color)

    async def get_reflections(self) -> list[core.Reflection]:
        return await self._run(core.get_reflections)

    async def save_reflection(self, date: core.DateLike, verse: str, text: str) -> core.Reflection:
        return await self._run(core.save_reflection, date, verse, text)

    async def delete_reflection(self, reflection_id: int) -> None:
        await self._run(core.delete_reflection, reflection_id)

    async def export_backup(self) -> backup.BackupPayload:
        return await self._run(backup.export_backup)

    async def import_backup(self, payload: backup.PayloadLike) -> int:
        return await self._run(backup.import_backup, payload)
