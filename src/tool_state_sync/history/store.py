# tool_state_sync/history/store.py
"""
HistoryStore - per-tool log of past inputs.

Handles:
- Appending a new entry when the input text changes
- Amending the latest entry's params when only parameters change
- Holding params edited before any input exists, until the first entry
- Deleting single entries and clearing per tool or globally

Storage failures are logged and swallowed: history is a convenience, and
the page keeps working from its in-memory state.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from pydantic import ValidationError

from tool_state_sync.config import PREVIEW_MAX_LENGTH
from tool_state_sync.exceptions import StorageError
from tool_state_sync.history.recent_tools import RecentToolsTracker
from tool_state_sync.models import (
    ClearScope,
    HistoryEntry,
    HistoryFiles,
    InputSide,
    ParamsMode,
    generate_entry_id,
    now_ms,
)
from tool_state_sync.storage import BY_TOOL_INDEX, HISTORY_TABLE, KeyValueStore, Row

log = logging.getLogger(__name__)


def make_preview(text: str, max_length: int = PREVIEW_MAX_LENGTH) -> str:
    """Single-line excerpt of an input for history listings."""
    preview = " ".join(text.split())
    if len(preview) <= max_length:
        return preview
    return preview[:max_length] + "..."


def _parse_entries(rows: Iterable[Row]) -> list[HistoryEntry]:
    entries = []
    for row in rows:
        try:
            entries.append(HistoryEntry.from_row(row))
        except ValidationError as e:
            log.debug(f"Skipping unreadable history row {row.get('id')!r}: {e}")
    return entries


def sort_by_recency(entries: Iterable[HistoryEntry]) -> list[HistoryEntry]:
    """Newest first. Entries created in the same millisecond keep insertion order, later first."""
    return sorted(reversed(list(entries)), key=lambda e: e.created_at, reverse=True)


async def list_history(db: KeyValueStore, tool_id: str | None = None) -> list[HistoryEntry]:
    """
    Read history entries, newest first.

    Args:
        db: The key/value store
        tool_id: Restrict to one tool via the by-tool index; all tools if None
    """
    if tool_id is None:
        rows = await db.get_all(HISTORY_TABLE)
    else:
        rows = await db.get_all_from_index(HISTORY_TABLE, BY_TOOL_INDEX, tool_id)
    return sort_by_recency(_parse_entries(rows))


class HistoryStore:
    """
    History of one tool, cached in memory and written through to the store.

    Examples:
        ```python
        history = HistoryStore("base64", db)
        await history.load()
        await history.upsert_params({"padding": False})      # pending, no entry yet
        entry = await history.add_entry({"leftText": "hi"}, {})
        assert entry.params == {"padding": False}
        ```
    """

    def __init__(
        self,
        tool_id: str,
        db: KeyValueStore,
        recent_tools: RecentToolsTracker | None = None,
        clock: Callable[[], int] = now_ms,
        preview_length: int = PREVIEW_MAX_LENGTH,
    ):
        self.tool_id = tool_id
        self._db = db
        self._clock = clock
        self._recent_tools = recent_tools or RecentToolsTracker(db, clock=clock)
        self._preview_length = preview_length
        self._entries: list[HistoryEntry] = []
        self._pending_params: dict[str, Any] = {}
        self._loaded = False

    # --- Read path ---

    @property
    def entries(self) -> list[HistoryEntry]:
        """Cached entries of this tool, newest first."""
        return list(self._entries)

    @property
    def latest(self) -> HistoryEntry | None:
        return self._entries[0] if self._entries else None

    @property
    def loaded(self) -> bool:
        return self._loaded

    @property
    def pending_params(self) -> dict[str, Any]:
        """Params recorded before any entry existed."""
        return dict(self._pending_params)

    async def load(self) -> list[HistoryEntry]:
        """Read this tool's entries from the store into the cache."""
        try:
            self._entries = await list_history(self._db, self.tool_id)
        except StorageError as e:
            log.warning(f"Failed to load history for {self.tool_id}: {e}")
            self._entries = []
        self._loaded = True
        log.debug(f"Loaded {len(self._entries)} history entries for {self.tool_id}")
        return self.entries

    async def _ensure_loaded(self) -> None:
        if not self._loaded:
            await self.load()

    def get_entry(self, entry_id: str) -> HistoryEntry | None:
        return next((e for e in self._entries if e.id == entry_id), None)

    # --- Write path ---

    async def add_entry(
        self,
        inputs: Mapping[str, str],
        params: Mapping[str, Any],
        input_side: InputSide | str | None = None,
        preview: str | None = None,
        files: HistoryFiles | None = None,
    ) -> HistoryEntry | None:
        """
        Append a new entry and mark the tool as recently used.

        Pending params are folded in underneath ``params``. ``created_at``
        never goes below the latest entry's, even if the wall clock does.

        Returns:
            The new entry, or None if the store rejected the write.
        """
        await self._ensure_loaded()

        now = self._clock()
        latest = self.latest
        created_at = max(now, latest.created_at) if latest else now
        if preview is None:
            text = next((v for v in inputs.values() if v), "")
            if not text and files is not None:
                text = files.left_name or files.right_name or ""
            preview = make_preview(text, self._preview_length)

        entry = HistoryEntry(
            id=generate_entry_id(created_at),
            tool_id=self.tool_id,
            created_at=created_at,
            updated_at=created_at,
            input_side=InputSide(input_side) if input_side is not None else None,
            inputs=dict(inputs),
            params={**self._pending_params, **params},
            preview=preview,
            files=files,
        )

        try:
            await self._db.put(HISTORY_TABLE, entry.to_row())
        except StorageError as e:
            log.warning(f"Failed to add history entry for {self.tool_id}: {e}")
            return None

        self._entries.insert(0, entry)
        self._pending_params = {}
        log.debug(f"Added history entry {entry.id} for {self.tool_id}")

        await self._recent_tools.record_tool_use(self.tool_id)
        return entry

    async def amend_latest_params(self, params: Mapping[str, Any]) -> HistoryEntry | None:
        """
        Replace the params of the latest entry in place.

        No-op when the tool has no entry yet.
        """
        await self._ensure_loaded()
        latest = self.latest
        if latest is None:
            return None

        updated = latest.model_copy(update={"params": dict(params), "updated_at": self._clock()})
        try:
            await self._db.put(HISTORY_TABLE, updated.to_row())
        except StorageError as e:
            log.warning(f"Failed to amend history entry {latest.id}: {e}")
            return None

        self._entries[0] = updated
        return updated

    async def upsert_input_entry(
        self,
        inputs: Mapping[str, str],
        params: Mapping[str, Any],
        input_side: InputSide | str | None = None,
        preview: str | None = None,
        files: HistoryFiles | None = None,
    ) -> HistoryEntry | None:
        """
        Record an input commit.

        Empty inputs without file payloads never create an entry; only their
        params are kept. Inputs and files identical to the latest entry amend
        it instead of duplicating.
        """
        await self._ensure_loaded()
        if not any(inputs.values()) and not (files is not None and files.has_payload):
            await self.upsert_params(params)
            return None

        latest = self.latest
        if latest is not None and latest.inputs == dict(inputs) and latest.files == files:
            return await self.amend_latest_params(params)
        return await self.add_entry(inputs, params, input_side, preview, files)

    async def upsert_params(
        self,
        params: Mapping[str, Any],
        mode: ParamsMode = ParamsMode.INTERPRETATION,
    ) -> HistoryEntry | None:
        """
        Record a parameter-only change.

        In interpretation mode the latest entry is amended. Without an
        entry, or in deferred mode, the params are held until the next
        ``add_entry`` so they are not lost.
        """
        await self._ensure_loaded()
        if mode == ParamsMode.INTERPRETATION and self.latest is not None:
            return await self.amend_latest_params(params)

        self._pending_params.update(params)
        log.debug(f"Holding pending params for {self.tool_id}: {sorted(self._pending_params)}")
        return None

    async def delete_entry(self, entry_id: str) -> bool:
        try:
            removed = await self._db.delete(HISTORY_TABLE, entry_id)
        except StorageError as e:
            log.warning(f"Failed to delete history entry {entry_id}: {e}")
            return False
        self._entries = [e for e in self._entries if e.id != entry_id]
        return removed

    async def clear(self, scope: ClearScope | str = ClearScope.TOOL) -> None:
        """Remove this tool's entries, or every tool's entries."""
        scope = ClearScope(scope)
        try:
            if scope == ClearScope.ALL:
                await self._db.clear(HISTORY_TABLE)
            else:
                rows = await self._db.get_all_from_index(HISTORY_TABLE, BY_TOOL_INDEX, self.tool_id)
                await self._db.delete_many(HISTORY_TABLE, [row["id"] for row in rows])
        except StorageError as e:
            log.warning(f"Failed to clear {scope.value} history for {self.tool_id}: {e}")
            return

        self._entries = []
        self._pending_params = {}
        log.info(f"Cleared {scope.value} history from {self.tool_id}")
