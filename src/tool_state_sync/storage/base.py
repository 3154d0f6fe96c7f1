# tool_state_sync/storage/base.py
"""
Key/value store contract for the embedded history database.

Tables hold JSON-safe dict rows keyed by one field of the row, with
optional secondary indices over other fields. All operations are
asynchronous; failures raise StorageError.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import Any

from pydantic import BaseModel, Field

Row = dict[str, Any]


class TableSpec(BaseModel):
    """Layout of one table: primary key field and named secondary indices."""

    name: str
    key_path: str
    indexes: dict[str, str] = Field(default_factory=dict)  # index name -> row field

    model_config = {"frozen": True}

    def key_of(self, row: Row) -> str:
        return str(row[self.key_path])


HISTORY_TABLE = "history"
RECENT_TOOLS_TABLE = "recentTools"
FAVORITES_TABLE = "favorites"

BY_TOOL_INDEX = "by-tool"
BY_DATE_INDEX = "by-date"

STORE_LAYOUT: tuple[TableSpec, ...] = (
    TableSpec(
        name=HISTORY_TABLE,
        key_path="id",
        indexes={BY_TOOL_INDEX: "tool_id", BY_DATE_INDEX: "created_at"},
    ),
    TableSpec(name=RECENT_TOOLS_TABLE, key_path="tool_id"),
    TableSpec(name=FAVORITES_TABLE, key_path="tool_id"),
)


class KeyValueStore(ABC):
    """Async key/value store with secondary indices."""

    def __init__(self, layout: Iterable[TableSpec] = STORE_LAYOUT):
        self._tables = {spec.name: spec for spec in layout}

    def table(self, name: str) -> TableSpec:
        try:
            return self._tables[name]
        except KeyError:
            raise KeyError(f"Unknown table: {name}") from None

    @property
    def table_names(self) -> list[str]:
        return list(self._tables)

    @abstractmethod
    async def get(self, table: str, key: str) -> Row | None:
        """Row stored under ``key``, or None."""

    @abstractmethod
    async def put(self, table: str, row: Row) -> None:
        """Insert or replace a row. A replaced row keeps its insertion position."""

    @abstractmethod
    async def delete(self, table: str, key: str) -> bool:
        """Remove a row; True if one existed."""

    @abstractmethod
    async def delete_many(self, table: str, keys: Iterable[str]) -> int:
        """Remove several rows together; returns how many existed."""

    @abstractmethod
    async def clear(self, table: str) -> None:
        """Remove every row of a table."""

    @abstractmethod
    async def get_all(self, table: str) -> list[Row]:
        """All rows in insertion order."""

    @abstractmethod
    async def get_all_from_index(self, table: str, index: str, value: Any) -> list[Row]:
        """Rows whose indexed field equals ``value``, in insertion order."""

    async def close(self) -> None:
        """Release the underlying database."""
        return None

    async def __aenter__(self) -> KeyValueStore:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()
