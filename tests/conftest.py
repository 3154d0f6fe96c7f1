# tests/conftest.py
"""
Shared pytest fixtures and configuration for tool_state_sync tests.
"""

import logging
from unittest.mock import AsyncMock

import pytest

from tool_state_sync.exceptions import StorageError
from tool_state_sync.schema import FieldRole, FieldSpec, FieldType, InputSideConfig, ToolSchema
from tool_state_sync.storage import InMemoryKeyValueStore

# Configure logging for tests
logging.basicConfig(level=logging.WARNING)
logging.getLogger("tool_state_sync").setLevel(logging.DEBUG)


class FakeClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, start: int = 1_700_000_000_000):
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int = 1) -> int:
        self.now += ms
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    """Fresh in-memory key/value store for each test."""
    return InMemoryKeyValueStore()


@pytest.fixture
def failing_store():
    """Store whose every operation raises StorageError."""
    mock = AsyncMock(spec=InMemoryKeyValueStore)
    error = StorageError("database unavailable")
    for name in ("get", "put", "delete", "delete_many", "clear", "get_all", "get_all_from_index"):
        getattr(mock, name).side_effect = error
    return mock


@pytest.fixture
def text_schema():
    """Single-input tool: free text plus a couple of discrete params."""
    return ToolSchema(
        tool_id="url-escape",
        fields=[
            FieldSpec(name="text", role=FieldRole.INPUT),
            FieldSpec(name="mode", type=FieldType.ENUM, choices=("encode", "decode")),
            FieldSpec(name="plusForSpace", type=FieldType.BOOLEAN, default=False),
        ],
    )


@pytest.fixture
def base64_schema():
    """Dual-pane tool where the active side selects the input field."""
    return ToolSchema(
        tool_id="base64",
        fields=[
            FieldSpec(name="leftText", role=FieldRole.INPUT),
            FieldSpec(name="rightText", role=FieldRole.INPUT),
            FieldSpec(name="encoding", type=FieldType.ENUM, choices=("UTF-8", "ASCII", "ISO-8859-1")),
            FieldSpec(name="padding", type=FieldType.BOOLEAN, default=True),
            FieldSpec(name="urlSafe", type=FieldType.BOOLEAN, default=False),
            FieldSpec(name="lineWidth", type=FieldType.NUMBER, default=76),
            FieldSpec(name="activeSide", type=FieldType.ENUM, choices=("left", "right")),
        ],
        input_side=InputSideConfig(
            side_key="activeSide",
            input_key_by_side={"left": "leftText", "right": "rightText"},
        ),
    )
