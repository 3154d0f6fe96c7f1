# tests/storage/test_base.py
"""Tests for the store layout and the create_store factory."""

import pytest

from tool_state_sync.storage import (
    BY_DATE_INDEX,
    BY_TOOL_INDEX,
    HISTORY_TABLE,
    STORE_LAYOUT,
    InMemoryKeyValueStore,
    SqliteKeyValueStore,
    TableSpec,
    create_store,
)


class TestLayout:
    def test_tables(self):
        assert [spec.name for spec in STORE_LAYOUT] == ["history", "recentTools", "favorites"]

    def test_history_indexes(self):
        history = next(spec for spec in STORE_LAYOUT if spec.name == HISTORY_TABLE)
        assert history.key_path == "id"
        assert history.indexes == {BY_TOOL_INDEX: "tool_id", BY_DATE_INDEX: "created_at"}

    def test_key_of(self):
        spec = TableSpec(name="t", key_path="tool_id")
        assert spec.key_of({"tool_id": "hex", "x": 1}) == "hex"

    def test_unknown_table(self):
        with pytest.raises(KeyError):
            InMemoryKeyValueStore().table("sessions")

    def test_table_names(self):
        assert InMemoryKeyValueStore().table_names == ["history", "recentTools", "favorites"]


class TestCreateStore:
    def test_memory_without_path(self, monkeypatch):
        monkeypatch.setattr("tool_state_sync.storage.DEFAULT_DB_PATH", None)
        assert isinstance(create_store(), InMemoryKeyValueStore)

    def test_sqlite_with_path(self, tmp_path):
        store = create_store(tmp_path / "history.db")
        assert isinstance(store, SqliteKeyValueStore)
        assert store.path.endswith("history.db")

    def test_configured_path(self, monkeypatch, tmp_path):
        monkeypatch.setattr("tool_state_sync.storage.DEFAULT_DB_PATH", str(tmp_path / "env.db"))
        assert isinstance(create_store(), SqliteKeyValueStore)
