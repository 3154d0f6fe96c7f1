# tool_state_sync/models/__init__.py
"""
Persisted records and shared enums.
"""

from tool_state_sync.models.enums import (
    ClearScope,
    HydrationSource,
    InputSide,
    ParamsMode,
)
from tool_state_sync.models.history_entry import (
    HistoryEntry,
    HistoryFiles,
    generate_entry_id,
    now_ms,
)
from tool_state_sync.models.tool_records import FavoriteRecord, RecentToolRecord

__all__ = [
    "ClearScope",
    "FavoriteRecord",
    "HistoryEntry",
    "HistoryFiles",
    "HydrationSource",
    "InputSide",
    "ParamsMode",
    "RecentToolRecord",
    "generate_entry_id",
    "now_ms",
]
