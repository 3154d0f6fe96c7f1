# tool_state_sync/storage/providers/memory.py
"""
In-memory key/value store, used when no database path is configured
and in tests.
"""

from __future__ import annotations

import copy
from collections.abc import Iterable
from typing import Any

from tool_state_sync.storage.base import STORE_LAYOUT, KeyValueStore, Row, TableSpec


class InMemoryKeyValueStore(KeyValueStore):
    """Dict-backed store. Rows are copied on the way in and out."""

    def __init__(self, layout: Iterable[TableSpec] = STORE_LAYOUT):
        super().__init__(layout)
        self._data: dict[str, dict[str, Row]] = {name: {} for name in self._tables}

    def _rows(self, table: str) -> dict[str, Row]:
        self.table(table)
        return self._data[table]

    async def get(self, table: str, key: str) -> Row | None:
        row = self._rows(table).get(key)
        return copy.deepcopy(row) if row is not None else None

    async def put(self, table: str, row: Row) -> None:
        spec = self.table(table)
        # Assigning an existing key keeps its position in the dict
        self._rows(table)[spec.key_of(row)] = copy.deepcopy(row)

    async def delete(self, table: str, key: str) -> bool:
        return self._rows(table).pop(key, None) is not None

    async def delete_many(self, table: str, keys: Iterable[str]) -> int:
        rows = self._rows(table)
        return sum(1 for key in list(keys) if rows.pop(key, None) is not None)

    async def clear(self, table: str) -> None:
        self._rows(table).clear()

    async def get_all(self, table: str) -> list[Row]:
        return [copy.deepcopy(row) for row in self._rows(table).values()]

    async def get_all_from_index(self, table: str, index: str, value: Any) -> list[Row]:
        spec = self.table(table)
        if index not in spec.indexes:
            raise KeyError(f"Table {table} has no index {index}")
        field = spec.indexes[index]
        return [copy.deepcopy(row) for row in self._rows(table).values() if row.get(field) == value]
