# tests/storage/providers/test_sqlite_store.py
"""SQLite-specific behaviour: persistence, context management and failures."""

import sqlite3

import pytest

from tool_state_sync.exceptions import StorageError
from tool_state_sync.storage import HISTORY_TABLE, RECENT_TOOLS_TABLE, SqliteKeyValueStore


class TestSqlitePersistence:
    @pytest.mark.asyncio
    async def test_rows_survive_reopen(self, tmp_path):
        path = tmp_path / "history.db"
        async with SqliteKeyValueStore(path) as store:
            await store.put(RECENT_TOOLS_TABLE, {"tool_id": "hex", "last_used": 10})

        async with SqliteKeyValueStore(path) as store:
            assert await store.get(RECENT_TOOLS_TABLE, "hex") == {"tool_id": "hex", "last_used": 10}

    @pytest.mark.asyncio
    async def test_creates_parent_directories(self, tmp_path):
        path = tmp_path / "nested" / "dir" / "history.db"
        async with SqliteKeyValueStore(path) as store:
            await store.put(HISTORY_TABLE, {"id": "a", "tool_id": "t", "created_at": 1})
        assert path.exists()

    @pytest.mark.asyncio
    async def test_in_memory_database(self):
        store = SqliteKeyValueStore()
        await store.put(HISTORY_TABLE, {"id": "a", "tool_id": "t", "created_at": 1})
        assert len(await store.get_all(HISTORY_TABLE)) == 1
        await store.close()

    @pytest.mark.asyncio
    async def test_indexes_created(self, tmp_path):
        path = tmp_path / "history.db"
        async with SqliteKeyValueStore(path) as store:
            await store.get_all(HISTORY_TABLE)

        conn = sqlite3.connect(path)
        try:
            names = {row[0] for row in conn.execute("SELECT name FROM sqlite_master WHERE type = 'index'")}
        finally:
            conn.close()
        assert "idx_history_by_tool" in names
        assert "idx_history_by_date" in names

    @pytest.mark.asyncio
    async def test_close_is_idempotent(self, tmp_path):
        store = SqliteKeyValueStore(tmp_path / "history.db")
        await store.close()
        await store.close()


class TestSqliteFailures:
    @pytest.mark.asyncio
    async def test_corrupt_file_raises_storage_error(self, tmp_path):
        path = tmp_path / "corrupt.db"
        path.write_bytes(b"this is not a database" * 100)
        store = SqliteKeyValueStore(path)
        with pytest.raises(StorageError):
            await store.get_all(HISTORY_TABLE)

    @pytest.mark.asyncio
    async def test_unusable_path_raises_storage_error(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("file, not a directory")
        store = SqliteKeyValueStore(blocker / "history.db")
        with pytest.raises(StorageError):
            await store.put(HISTORY_TABLE, {"id": "a", "tool_id": "t", "created_at": 1})
