# tool_state_sync/history/recent_tools.py
from __future__ import annotations

import logging
from collections.abc import Callable

from pydantic import ValidationError

from tool_state_sync.config import RECENT_TOOLS_LIMIT
from tool_state_sync.exceptions import StorageError
from tool_state_sync.models import RecentToolRecord, now_ms
from tool_state_sync.storage import RECENT_TOOLS_TABLE, KeyValueStore

log = logging.getLogger(__name__)


class RecentToolsTracker:
    """Most recently opened tools, newest first, capped at ``limit``."""

    def __init__(
        self,
        db: KeyValueStore,
        limit: int = RECENT_TOOLS_LIMIT,
        clock: Callable[[], int] = now_ms,
    ):
        self._db = db
        self._limit = limit
        self._clock = clock
        self._recent: list[str] = []

    @property
    def recent_tools(self) -> list[str]:
        return list(self._recent)

    @property
    def limit(self) -> int:
        return self._limit

    async def _read_records(self) -> list[RecentToolRecord]:
        records = []
        for row in await self._db.get_all(RECENT_TOOLS_TABLE):
            try:
                records.append(RecentToolRecord.from_row(row))
            except ValidationError as e:
                log.debug(f"Skipping unreadable recent tool record: {e}")
        return sorted(records, key=lambda r: r.last_used, reverse=True)

    async def load(self) -> list[str]:
        try:
            records = await self._read_records()
        except StorageError as e:
            log.warning(f"Failed to load recent tools: {e}")
            return self.recent_tools
        self._recent = [r.tool_id for r in records[: self._limit]]
        return self.recent_tools

    async def record_tool_use(self, tool_id: str) -> None:
        """Mark a tool as just used and drop records beyond the cap."""
        record = RecentToolRecord(tool_id=tool_id, last_used=self._clock())
        try:
            await self._db.put(RECENT_TOOLS_TABLE, record.to_row())
            stale = (await self._read_records())[self._limit :]
            if stale:
                await self._db.delete_many(RECENT_TOOLS_TABLE, [r.tool_id for r in stale])
        except StorageError as e:
            log.warning(f"Failed to record tool use for {tool_id}: {e}")
            return
        self._recent = [tool_id, *(t for t in self._recent if t != tool_id)][: self._limit]
