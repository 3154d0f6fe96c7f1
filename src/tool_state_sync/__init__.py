# tool_state_sync/__init__.py
"""
tool-state-sync: state synchronization and history engine for utility tools.

Keeps a tool's working state mirrored into a shareable query string,
records a navigable history of past inputs in a local key/value store,
and decides on each page load whether the address bar, history or the
schema defaults seed the state.

Quick start:
    from tool_state_sync import FieldRole, FieldSpec, FieldType, ToolSchema, ToolStateManager

    schema = ToolSchema(
        tool_id="url-escape",
        fields=[
            FieldSpec(name="text", role=FieldRole.INPUT),
            FieldSpec(name="mode", type=FieldType.ENUM, choices=("encode", "decode")),
        ],
    )

    async with ToolStateManager(schema) as manager:
        sync = await manager.open("?text=hello")
        await sync.set_field("mode", "decode")
"""

from tool_state_sync.exceptions import (
    InvalidFieldValueError,
    StorageError,
    ToolStateError,
    UnknownFieldError,
)
from tool_state_sync.history import FavoritesStore, HistoryStore, RecentToolsTracker
from tool_state_sync.hydration import HydrationResolver, HydrationResult
from tool_state_sync.models import (
    ClearScope,
    FavoriteRecord,
    HistoryEntry,
    HistoryFiles,
    HydrationSource,
    InputSide,
    ParamsMode,
    RecentToolRecord,
)
from tool_state_sync.scheduler import DebounceScheduler
from tool_state_sync.schema import (
    FieldRole,
    FieldSpec,
    FieldType,
    InputSideConfig,
    ToolSchema,
    ToolState,
)
from tool_state_sync.storage import (
    InMemoryKeyValueStore,
    KeyValueStore,
    SqliteKeyValueStore,
    create_store,
)
from tool_state_sync.synchronizer import CommitPhase, CommitTracker, StateSynchronizer
from tool_state_sync.tool_state_manager import ToolStateManager

__version__ = "0.1.0"

__all__ = [
    # Facade
    "ToolStateManager",
    # Core
    "StateSynchronizer",
    "CommitPhase",
    "CommitTracker",
    "HydrationResolver",
    "HydrationResult",
    "DebounceScheduler",
    # Schema
    "FieldRole",
    "FieldSpec",
    "FieldType",
    "InputSideConfig",
    "ToolSchema",
    "ToolState",
    # History
    "HistoryStore",
    "RecentToolsTracker",
    "FavoritesStore",
    # Models
    "ClearScope",
    "FavoriteRecord",
    "HistoryEntry",
    "HistoryFiles",
    "HydrationSource",
    "InputSide",
    "ParamsMode",
    "RecentToolRecord",
    # Storage
    "KeyValueStore",
    "InMemoryKeyValueStore",
    "SqliteKeyValueStore",
    "create_store",
    # Errors
    "ToolStateError",
    "UnknownFieldError",
    "InvalidFieldValueError",
    "StorageError",
]
