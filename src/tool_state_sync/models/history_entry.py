# tool_state_sync/models/history_entry.py
from __future__ import annotations

import base64
import time
import uuid
from typing import Any

from pydantic import Field, computed_field, field_serializer, field_validator

from tool_state_sync.base_models import RowModel
from tool_state_sync.models.enums import InputSide


def now_ms() -> int:
    """Wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


def generate_entry_id(timestamp: int | None = None) -> str:
    """Opaque unique id, prefixed with its creation time."""
    stamp = now_ms() if timestamp is None else timestamp
    return f"{stamp}-{uuid.uuid4().hex[:9]}"


class HistoryFiles(RowModel):
    """
    Files the user opened into the input panes.

    Payloads are raw bytes in memory and base64 text in stored rows.
    """

    left: bytes | None = None
    right: bytes | None = None
    left_name: str | None = None
    right_name: str | None = None

    @field_validator("left", "right", mode="before")
    @classmethod
    def _decode_payload(cls, value: Any) -> Any:
        if isinstance(value, str):
            return base64.b64decode(value, validate=True)
        return value

    @field_serializer("left", "right", when_used="json-unless-none")
    def _encode_payload(self, value: bytes) -> str:
        return base64.b64encode(value).decode("ascii")

    @property
    def has_payload(self) -> bool:
        return bool(self.left or self.right)

    def name_for(self, side: InputSide | str) -> str | None:
        return self.left_name if InputSide(side) == InputSide.LEFT else self.right_name


class HistoryEntry(RowModel):
    """One recorded input of a tool, with the parameters it was used with."""

    id: str = Field(default_factory=generate_entry_id)
    tool_id: str
    created_at: int = Field(default_factory=now_ms)
    updated_at: int = Field(default_factory=now_ms)
    input_side: InputSide | None = None
    inputs: dict[str, str] = Field(default_factory=dict)
    params: dict[str, Any] = Field(default_factory=dict)
    preview: str | None = None
    files: HistoryFiles | None = None

    @computed_field
    @property
    def has_input(self) -> bool:
        """Stored with the row so listings can tell empty entries apart without reading inputs."""
        if self.files is not None and self.files.has_payload:
            return True
        return any(value for value in self.inputs.values())
