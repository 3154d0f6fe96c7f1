# tool_state_sync/storage/__init__.py
"""
Embedded key/value storage for history, recent tools and favorites.
"""

from __future__ import annotations

from pathlib import Path

from tool_state_sync.config import DEFAULT_DB_PATH
from tool_state_sync.storage.base import (
    BY_DATE_INDEX,
    BY_TOOL_INDEX,
    FAVORITES_TABLE,
    HISTORY_TABLE,
    RECENT_TOOLS_TABLE,
    STORE_LAYOUT,
    KeyValueStore,
    Row,
    TableSpec,
)
from tool_state_sync.storage.providers import InMemoryKeyValueStore, SqliteKeyValueStore


def create_store(path: str | Path | None = None) -> KeyValueStore:
    """SQLite store at ``path`` (or the configured path), else an in-memory store."""
    target = path if path is not None else DEFAULT_DB_PATH
    if target:
        return SqliteKeyValueStore(target)
    return InMemoryKeyValueStore()


__all__ = [
    "BY_DATE_INDEX",
    "BY_TOOL_INDEX",
    "FAVORITES_TABLE",
    "HISTORY_TABLE",
    "RECENT_TOOLS_TABLE",
    "STORE_LAYOUT",
    "InMemoryKeyValueStore",
    "KeyValueStore",
    "Row",
    "SqliteKeyValueStore",
    "TableSpec",
    "create_store",
]
