# tool_state_sync/schema/__init__.py
"""
Tool schemas: declared, typed field lists and the binder that produces
fully defaulted tool states from loosely typed input.
"""

from tool_state_sync.schema.fields import FieldRole, FieldSpec, FieldType
from tool_state_sync.schema.tool_schema import (
    InputSideConfig,
    ToolSchema,
    ToolState,
)

__all__ = [
    "FieldRole",
    "FieldSpec",
    "FieldType",
    "InputSideConfig",
    "ToolSchema",
    "ToolState",
]
