# tool_state_sync/models/tool_records.py
from __future__ import annotations

from pydantic import Field

from tool_state_sync.base_models import RowModel
from tool_state_sync.models.history_entry import now_ms


class RecentToolRecord(RowModel):
    """Last time a tool page was opened. One record per tool."""

    tool_id: str
    last_used: int = Field(default_factory=now_ms)


class FavoriteRecord(RowModel):
    """A pinned tool. The record existing is the membership."""

    tool_id: str
    added_at: int = Field(default_factory=now_ms)
