# tool_state_sync/storage/providers/__init__.py
"""Concrete key/value store providers."""

from tool_state_sync.storage.providers.memory import InMemoryKeyValueStore
from tool_state_sync.storage.providers.sqlite import SqliteKeyValueStore

__all__ = ["InMemoryKeyValueStore", "SqliteKeyValueStore"]
