# tool_state_sync/models/enums.py
"""Enums shared by the history and hydration layers."""

from enum import Enum


class InputSide(str, Enum):
    """Which pane of a dual-pane tool holds the user's input."""

    LEFT = "left"
    RIGHT = "right"


class HydrationSource(str, Enum):
    """Where the initial state of a page activation came from."""

    URL = "url"
    HISTORY = "history"
    DEFAULT = "default"


class ParamsMode(str, Enum):
    """How a parameter-only change is applied to history."""

    INTERPRETATION = "interpretation"  # Amend the latest entry in place
    DEFERRED = "deferred"  # Hold until the next input entry is created


class ClearScope(str, Enum):
    """Scope of a bulk history clear."""

    TOOL = "tool"
    ALL = "all"
