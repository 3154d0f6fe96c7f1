# tool_state_sync/hydration.py
"""
HydrationResolver - picks the source of a page's initial state.

Precedence, decided once per page activation:
1. the address bar, if it carries at least one key the tool declares
2. the tool's most recent history entry
3. the schema defaults
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any

from pydantic import BaseModel, Field

from tool_state_sync.history import HistoryStore
from tool_state_sync.models import HistoryEntry, HistoryFiles, HydrationSource
from tool_state_sync.schema import ToolSchema, ToolState
from tool_state_sync.url_state import decode_fragment, decode_query

logger = logging.getLogger(__name__)

# Maps a history entry back into the tool's own field names. Attached files
# are not fields; the synchronizer restores them from the entry itself.
HistoryLoader = Callable[[HistoryEntry], Mapping[str, Any]]


def default_history_loader(entry: HistoryEntry) -> dict[str, Any]:
    """Params overlaid by inputs, which share the tool's field names."""
    return {**entry.params, **entry.inputs}


class HydrationResult(BaseModel):
    """Outcome of hydration, kept for the lifetime of the page."""

    source: HydrationSource
    state: Any
    entry: HistoryEntry | None = None
    recognized_keys: list[str] = Field(default_factory=list)

    @property
    def from_url(self) -> bool:
        return self.source == HydrationSource.URL

    @property
    def from_history(self) -> bool:
        return self.source == HydrationSource.HISTORY

    @property
    def files(self) -> HistoryFiles | None:
        return self.entry.files if self.entry is not None else None


class HydrationResolver:
    """Resolves the initial ToolState for one page activation."""

    def __init__(
        self,
        schema: ToolSchema,
        history: HistoryStore | None = None,
        on_load_history: HistoryLoader | None = None,
    ):
        self._schema = schema
        self._history = history
        self._on_load_history = on_load_history or default_history_loader
        self._result: HydrationResult | None = None

    @property
    def result(self) -> HydrationResult | None:
        return self._result

    def state_from_entry(self, entry: HistoryEntry) -> ToolState:
        return self._schema.bind(self._on_load_history(entry))

    async def resolve(self, query: str = "", fragment: str | None = None) -> HydrationResult:
        """
        Decide the initial state.

        Args:
            query: Address-bar query string, with or without the leading ``?``
            fragment: Optional compressed share fragment

        Returns:
            The hydration result. Later calls return the first result.
        """
        if self._result is not None:
            logger.debug(f"Hydration for {self._schema.tool_id} already resolved")
            return self._result

        raw: dict[str, Any] = {}
        if fragment:
            raw.update(decode_fragment(self._schema, fragment))
        raw.update(decode_query(query))
        recognized = self._schema.recognized_keys(raw)

        if recognized:
            result = HydrationResult(
                source=HydrationSource.URL,
                state=self._schema.bind(raw),
                recognized_keys=recognized,
            )
        else:
            entry = await self._latest_entry()
            if entry is not None:
                result = HydrationResult(
                    source=HydrationSource.HISTORY,
                    state=self.state_from_entry(entry),
                    entry=entry,
                )
            else:
                result = HydrationResult(source=HydrationSource.DEFAULT, state=self._schema.defaults())

        logger.info(f"Hydrated {self._schema.tool_id} from {result.source.value}")
        self._result = result
        return result

    async def _latest_entry(self) -> HistoryEntry | None:
        if self._history is None:
            return None
        if not self._history.loaded:
            await self._history.load()
        return self._history.latest
