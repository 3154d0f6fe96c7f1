# tool_state_sync/history/__init__.py
"""
Persisted history of tool inputs, plus the recent-tools and favorites
satellite stores.

Usage:
    from tool_state_sync.history import HistoryStore
    from tool_state_sync.storage import create_store

    db = create_store()
    history = HistoryStore("base64", db)
    await history.load()

    # Input text changed and is non-empty: new entry
    await history.upsert_input_entry({"leftText": "hello"}, {"padding": True})

    # Only a parameter changed: the latest entry is amended
    await history.upsert_params({"padding": False})
"""

from tool_state_sync.history.favorites import FavoritesStore
from tool_state_sync.history.recent_tools import RecentToolsTracker
from tool_state_sync.history.store import (
    HistoryStore,
    list_history,
    make_preview,
    sort_by_recency,
)

__all__ = [
    "FavoritesStore",
    "HistoryStore",
    "RecentToolsTracker",
    "list_history",
    "make_preview",
    "sort_by_recency",
]
