# tool_state_sync/base_models.py
"""Base model for records persisted as key/value rows."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Self

from pydantic import BaseModel


class RowModel(BaseModel):
    """A record that is written to and read back from a store table."""

    def to_row(self) -> dict[str, Any]:
        """JSON-safe dict for writing to a key/value table."""
        return self.model_dump(mode="json")

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> Self:
        """
        Rebuild a record from a stored row.

        Raises:
            ValidationError: The row does not describe a valid record
        """
        return cls.model_validate(dict(row))
