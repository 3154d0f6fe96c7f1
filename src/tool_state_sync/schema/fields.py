# tool_state_sync/schema/fields.py
"""
Field declarations for tool schemas.

A field knows its type, its default, and how to move a value between its
native form and the text form used in the address bar.
"""

from __future__ import annotations

import math
from collections.abc import Callable
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, model_validator

_TRUE_TEXT = frozenset({"true", "1"})
_FALSE_TEXT = frozenset({"false", "0"})

_RESERVED_NAMES = frozenset(dir(BaseModel))


class FieldType(str, Enum):
    """Value types a tool field can hold."""

    STRING = "string"
    BOOLEAN = "boolean"
    NUMBER = "number"
    ENUM = "enum"


class FieldRole(str, Enum):
    """How edits to a field reach history."""

    INPUT = "input"  # Free text, committed after the debounce window
    PARAM = "param"  # Discrete option, amends the latest entry immediately


class FieldSpec(BaseModel):
    """Declaration of one tool field."""

    name: str
    type: FieldType = FieldType.STRING
    default: Any = None
    choices: tuple[str, ...] = ()
    role: FieldRole = FieldRole.PARAM
    validator: Callable[[Any], bool] | None = Field(default=None, exclude=True)

    model_config = {"frozen": True, "arbitrary_types_allowed": True}

    @model_validator(mode="before")
    @classmethod
    def _fill_default(cls, data: Any) -> Any:
        if not isinstance(data, dict) or data.get("default") is not None:
            return data
        field_type = FieldType(data.get("type", FieldType.STRING))
        choices = tuple(data.get("choices") or ())
        if field_type == FieldType.BOOLEAN:
            default: Any = False
        elif field_type == FieldType.NUMBER:
            default = 0
        elif field_type == FieldType.ENUM:
            default = choices[0] if choices else None
        else:
            default = ""
        return {**data, "default": default}

    @model_validator(mode="after")
    def _check_declaration(self) -> FieldSpec:
        if not self.name.isidentifier() or self.name.startswith(("_", "model_")) or self.name in _RESERVED_NAMES:
            raise ValueError(f"Invalid field name: {self.name!r}")
        if self.type == FieldType.ENUM and not self.choices:
            raise ValueError(f"Enum field {self.name!r} declares no choices")
        if self.role == FieldRole.INPUT and self.type != FieldType.STRING:
            raise ValueError(f"Input field {self.name!r} must be a string field")
        # Raises if the declared default is not a legal value of the field
        self.coerce(self.default)
        return self

    def coerce(self, raw: Any) -> Any:
        """
        Convert a native value or its text form to the field's type.

        Raises:
            ValueError: If the value is not legal for this field.
        """
        value = self._coerce_type(raw)
        if self.validator is not None and not self.validator(value):
            raise ValueError(f"Value rejected by validator for {self.name!r}")
        return value

    def _coerce_type(self, raw: Any) -> Any:
        if self.type == FieldType.STRING:
            if not isinstance(raw, str):
                raise ValueError(f"Expected text for {self.name!r}, got {type(raw).__name__}")
            return raw

        if self.type == FieldType.BOOLEAN:
            if isinstance(raw, bool):
                return raw
            if isinstance(raw, str):
                text = raw.strip().lower()
                if text in _TRUE_TEXT:
                    return True
                if text in _FALSE_TEXT:
                    return False
            raise ValueError(f"Expected a boolean for {self.name!r}, got {raw!r}")

        if self.type == FieldType.NUMBER:
            if isinstance(raw, bool):
                raise ValueError(f"Expected a number for {self.name!r}, got a boolean")
            if isinstance(raw, int):
                return raw
            if isinstance(raw, float):
                number: int | float = raw
            elif isinstance(raw, str):
                number = _parse_number(raw)
            else:
                raise ValueError(f"Expected a number for {self.name!r}, got {type(raw).__name__}")
            if isinstance(number, float) and not math.isfinite(number):
                raise ValueError(f"Non-finite number for {self.name!r}")
            return number

        if not isinstance(raw, str) or raw not in self.choices:
            raise ValueError(f"{raw!r} is not one of {list(self.choices)} for {self.name!r}")
        return raw

    def serialize(self, value: Any) -> str:
        """Text form of a value, the inverse of :meth:`coerce`."""
        if self.type == FieldType.BOOLEAN:
            return "true" if value else "false"
        if self.type == FieldType.NUMBER:
            return repr(value)
        return str(value)

    @property
    def python_type(self) -> Any:
        if self.type == FieldType.BOOLEAN:
            return bool
        if self.type == FieldType.NUMBER:
            return int | float
        return str


def _parse_number(text: str) -> int | float:
    stripped = text.strip()
    if not stripped:
        raise ValueError("Empty number")
    try:
        return int(stripped)
    except ValueError:
        return float(stripped)
