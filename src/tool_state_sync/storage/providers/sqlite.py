# tool_state_sync/storage/providers/sqlite.py
"""
SQLite-backed key/value store.

Each table stores one JSON payload per row plus an autoincrement sequence
that records insertion order. Secondary indices are expression indices
over ``json_extract`` of the indexed field. Blocking sqlite calls run in
a worker thread so they never stall the event loop.
"""

from __future__ import annotations

import asyncio
import json
import logging
import sqlite3
import threading
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import Any, TypeVar

from tool_state_sync.exceptions import StorageError
from tool_state_sync.storage.base import STORE_LAYOUT, KeyValueStore, Row, TableSpec

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _json_path(field: str) -> str:
    if not field.isidentifier():
        raise ValueError(f"Index field must be an identifier: {field!r}")
    return f"$.{field}"


def _index_name(table: str, index: str) -> str:
    return "idx_" + "".join(c if c.isalnum() else "_" for c in f"{table}_{index}")


class SqliteKeyValueStore(KeyValueStore):
    """Key/value tables in a single SQLite database file (or ``:memory:``)."""

    def __init__(
        self,
        path: str | Path = ":memory:",
        layout: Iterable[TableSpec] = STORE_LAYOUT,
        timeout: float = 2.0,
    ):
        super().__init__(layout)
        self._path = str(path)
        self._timeout = timeout
        self._conn: sqlite3.Connection | None = None
        self._lock = threading.Lock()

    @property
    def path(self) -> str:
        return self._path

    # --- Connection handling ---

    def _connect(self) -> sqlite3.Connection:
        if self._conn is not None:
            return self._conn
        if self._path != ":memory:":
            Path(self._path).parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(self._path, timeout=self._timeout, check_same_thread=False)
        if self._path != ":memory:":
            conn.execute("PRAGMA journal_mode=WAL")
        for spec in self._tables.values():
            conn.execute(
                f'CREATE TABLE IF NOT EXISTS "{spec.name}" ('
                "seq INTEGER PRIMARY KEY AUTOINCREMENT, "
                "key TEXT NOT NULL UNIQUE, "
                "payload_json TEXT NOT NULL)"
            )
            for index, field in spec.indexes.items():
                conn.execute(
                    f'CREATE INDEX IF NOT EXISTS "{_index_name(spec.name, index)}" '
                    f"ON \"{spec.name}\"(json_extract(payload_json, '{_json_path(field)}'))"
                )
        conn.commit()
        logger.info(f"Opened history database at {self._path}")
        self._conn = conn
        return conn

    async def _run(self, fn: Callable[[sqlite3.Connection], T]) -> T:
        def call() -> T:
            with self._lock:
                conn = self._connect()
                try:
                    result = fn(conn)
                    conn.commit()
                    return result
                except sqlite3.Error:
                    conn.rollback()
                    raise

        try:
            return await asyncio.to_thread(call)
        except (sqlite3.Error, OSError) as e:
            raise StorageError(f"SQLite operation failed on {self._path}: {e}") from e

    # --- KeyValueStore ---

    async def get(self, table: str, key: str) -> Row | None:
        spec = self.table(table)

        def op(conn: sqlite3.Connection) -> Row | None:
            row = conn.execute(f'SELECT payload_json FROM "{spec.name}" WHERE key = ?', (key,)).fetchone()
            return json.loads(row[0]) if row else None

        return await self._run(op)

    async def put(self, table: str, row: Row) -> None:
        spec = self.table(table)
        key = spec.key_of(row)
        payload = json.dumps(row)

        def op(conn: sqlite3.Connection) -> None:
            conn.execute(
                f'INSERT INTO "{spec.name}" (key, payload_json) VALUES (?, ?) '
                "ON CONFLICT(key) DO UPDATE SET payload_json = excluded.payload_json",
                (key, payload),
            )

        await self._run(op)

    async def delete(self, table: str, key: str) -> bool:
        spec = self.table(table)

        def op(conn: sqlite3.Connection) -> bool:
            return conn.execute(f'DELETE FROM "{spec.name}" WHERE key = ?', (key,)).rowcount > 0

        return await self._run(op)

    async def delete_many(self, table: str, keys: Iterable[str]) -> int:
        spec = self.table(table)
        key_list = [(key,) for key in keys]

        def op(conn: sqlite3.Connection) -> int:
            removed = 0
            for params in key_list:
                removed += conn.execute(f'DELETE FROM "{spec.name}" WHERE key = ?', params).rowcount
            return removed

        return await self._run(op)

    async def clear(self, table: str) -> None:
        spec = self.table(table)
        await self._run(lambda conn: conn.execute(f'DELETE FROM "{spec.name}"'))

    async def get_all(self, table: str) -> list[Row]:
        spec = self.table(table)

        def op(conn: sqlite3.Connection) -> list[Row]:
            rows = conn.execute(f'SELECT payload_json FROM "{spec.name}" ORDER BY seq').fetchall()
            return [json.loads(r[0]) for r in rows]

        return await self._run(op)

    async def get_all_from_index(self, table: str, index: str, value: Any) -> list[Row]:
        spec = self.table(table)
        if index not in spec.indexes:
            raise KeyError(f"Table {table} has no index {index}")
        path = _json_path(spec.indexes[index])

        def op(conn: sqlite3.Connection) -> list[Row]:
            rows = conn.execute(
                f"SELECT payload_json FROM \"{spec.name}\" WHERE json_extract(payload_json, '{path}') = ? ORDER BY seq",
                (value,),
            ).fetchall()
            return [json.loads(r[0]) for r in rows]

        return await self._run(op)

    async def close(self) -> None:
        def op() -> None:
            with self._lock:
                if self._conn is not None:
                    self._conn.close()
                    self._conn = None

        await asyncio.to_thread(op)
