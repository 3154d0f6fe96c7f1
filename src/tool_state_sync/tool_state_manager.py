# src/tool_state_sync/tool_state_manager.py
"""
ToolStateManager - High-level API for one activation of a tool page.

This module provides the ToolStateManager class which wires together:
- History loading and the recent-tools record of the visit
- Hydration from the address bar, history or defaults
- The live StateSynchronizer for the page
- Favorites and history selection from the page's history panel
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from tool_state_sync.config import DEFAULT_DEBOUNCE_MS, OVERSIZE_THRESHOLD_BYTES, RECENT_TOOLS_LIMIT
from tool_state_sync.history import FavoritesStore, HistoryStore, RecentToolsTracker
from tool_state_sync.hydration import HistoryLoader, HydrationResolver, HydrationResult
from tool_state_sync.models import HistoryEntry, now_ms
from tool_state_sync.scheduler import DebounceScheduler
from tool_state_sync.schema import ToolSchema
from tool_state_sync.storage import KeyValueStore, create_store
from tool_state_sync.synchronizer import MirrorListener, StateSynchronizer

logger = logging.getLogger(__name__)


class ToolStateManager:
    """
    Entry point for a tool page.

    Examples:
        Basic usage:
        ```python
        manager = ToolStateManager(schema)
        sync = await manager.open("?leftText=hello")
        await sync.set_field("leftText", "hello world")
        await manager.close()
        ```

        As a context manager, with a persistent database:
        ```python
        async with ToolStateManager(schema, store=create_store("history.db")) as manager:
            sync = await manager.open(query)
        ```
    """

    def __init__(
        self,
        schema: ToolSchema,
        store: KeyValueStore | None = None,
        debounce_ms: int = DEFAULT_DEBOUNCE_MS,
        oversize_threshold: int = OVERSIZE_THRESHOLD_BYTES,
        recent_tools_limit: int = RECENT_TOOLS_LIMIT,
        on_load_history: HistoryLoader | None = None,
        on_mirror_change: MirrorListener | None = None,
        clock: Callable[[], int] = now_ms,
    ):
        """
        Initialize a ToolStateManager.

        Args:
            schema: Declared fields of the tool.
            store: Key/value store for history. Defaults to ``create_store()``.
            debounce_ms: Idle window before free-text edits are committed.
            oversize_threshold: Byte limit for a field in the address bar.
            recent_tools_limit: Length of the recent tools list.
            on_load_history: Maps a history entry into the tool's field names.
            on_mirror_change: Called with the new query string on every mirror change.
            clock: Millisecond clock used for history timestamps.
        """
        self._schema = schema
        self._owns_store = store is None
        self._store = store or create_store()
        self._debounce_ms = debounce_ms
        self._oversize_threshold = oversize_threshold
        self._on_load_history = on_load_history
        self._on_mirror_change = on_mirror_change

        self._recent_tools = RecentToolsTracker(self._store, limit=recent_tools_limit, clock=clock)
        self._favorites = FavoritesStore(self._store, clock=clock)
        self._history = HistoryStore(schema.tool_id, self._store, recent_tools=self._recent_tools, clock=clock)
        self._resolver = HydrationResolver(schema, self._history, on_load_history=on_load_history)
        self._scheduler = DebounceScheduler()
        self._synchronizer: StateSynchronizer | None = None

    @property
    def tool_id(self) -> str:
        return self._schema.tool_id

    @property
    def store(self) -> KeyValueStore:
        return self._store

    @property
    def history(self) -> HistoryStore:
        return self._history

    @property
    def recent_tools(self) -> RecentToolsTracker:
        return self._recent_tools

    @property
    def favorites(self) -> FavoritesStore:
        return self._favorites

    @property
    def hydration(self) -> HydrationResult | None:
        return self._resolver.result

    @property
    def synchronizer(self) -> StateSynchronizer:
        if self._synchronizer is None:
            raise RuntimeError(f"Tool {self.tool_id} has not been opened")
        return self._synchronizer

    async def open(self, query: str = "", fragment: str | None = None) -> StateSynchronizer:
        """
        Activate the page: load history, record the visit, hydrate, start syncing.

        Calling ``open`` again returns the existing synchronizer.
        """
        if self._synchronizer is not None:
            return self._synchronizer

        await self._history.load()
        await self._recent_tools.load()
        await self._favorites.load()
        await self._recent_tools.record_tool_use(self.tool_id)

        hydration = await self._resolver.resolve(query, fragment)
        self._synchronizer = StateSynchronizer(
            self._schema,
            hydration,
            history=self._history,
            scheduler=self._scheduler,
            debounce_ms=self._debounce_ms,
            oversize_threshold=self._oversize_threshold,
            on_mirror_change=self._on_mirror_change,
            on_load_history=self._on_load_history,
        )
        await self._synchronizer.start()
        logger.info(f"Opened tool {self.tool_id} (hydrated from {hydration.source.value})")
        return self._synchronizer

    async def select_history_entry(self, entry_id: str) -> HistoryEntry | None:
        """Load a past entry of this tool into the live state."""
        entry = self._history.get_entry(entry_id)
        if entry is None:
            logger.debug(f"No history entry {entry_id} for {self.tool_id}")
            return None
        await self.synchronizer.load_history_entry(entry)
        return entry

    async def toggle_favorite(self) -> bool:
        return await self._favorites.toggle(self.tool_id)

    async def close(self) -> None:
        """Leave the page: cancel pending commits, release an owned store."""
        if self._synchronizer is not None:
            await self._synchronizer.close()
        await self._scheduler.aclose()
        if self._owns_store:
            await self._store.close()

    async def __aenter__(self) -> ToolStateManager:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()
