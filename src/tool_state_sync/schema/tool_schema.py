# tool_state_sync/schema/tool_schema.py
"""
ToolSchema - declared field list of one tool, and the binder that turns
loosely typed parameter maps into a fully defaulted ToolState.

Binding never fails on bad data: unknown keys are ignored and invalid
values fall back to the field default. Live edits go through
``coerce_field`` instead, which raises.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, PrivateAttr, create_model, model_validator

from tool_state_sync.exceptions import InvalidFieldValueError, UnknownFieldError
from tool_state_sync.models.enums import InputSide
from tool_state_sync.schema.fields import FieldRole, FieldSpec, FieldType

logger = logging.getLogger(__name__)

TOOL_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")

INPUT_SIDES = frozenset(side.value for side in InputSide)

# Every tool's state model is an instance of a model created from its schema
ToolState = BaseModel


class InputSideConfig(BaseModel):
    """Dual-pane tools: which enum param selects the active input field."""

    side_key: str
    input_key_by_side: dict[str, str]

    model_config = {"frozen": True}


class ToolSchema(BaseModel):
    """
    Declared fields of a tool.

    Checked at construction: field names are unique and the optional input
    side configuration points at real fields. A strict, frozen pydantic
    model is generated for the tool's state.

    Example:
        ```python
        schema = ToolSchema(
            tool_id="base64",
            fields=[
                FieldSpec(name="leftText", role=FieldRole.INPUT),
                FieldSpec(name="padding", type=FieldType.BOOLEAN, default=True),
            ],
        )
        state = schema.bind({"leftText": "hi", "padding": "0"})
        ```
    """

    tool_id: str
    fields: tuple[FieldSpec, ...]
    input_side: InputSideConfig | None = None

    model_config = {"frozen": True}

    _by_name: dict[str, FieldSpec] = PrivateAttr(default_factory=dict)
    _state_model: type[BaseModel] = PrivateAttr()

    @model_validator(mode="after")
    def _check_fields(self) -> ToolSchema:
        if not TOOL_ID_PATTERN.match(self.tool_id):
            raise ValueError(f"Invalid tool id: {self.tool_id!r}")
        if not self.fields:
            raise ValueError(f"Tool {self.tool_id!r} declares no fields")

        names = [spec.name for spec in self.fields]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise ValueError(f"Duplicate field names: {duplicates}")

        by_name = {spec.name: spec for spec in self.fields}
        if self.input_side is not None:
            side = by_name.get(self.input_side.side_key)
            if side is None or side.type != FieldType.ENUM or side.role != FieldRole.PARAM:
                raise ValueError(f"Side key {self.input_side.side_key!r} must be an enum param field")
            for side_name, field_name in self.input_side.input_key_by_side.items():
                if side_name not in INPUT_SIDES:
                    raise ValueError(f"Side must be one of {sorted(INPUT_SIDES)}, got {side_name!r}")
                if side_name not in side.choices:
                    raise ValueError(f"Side {side_name!r} is not a choice of {side.name!r}")
                target = by_name.get(field_name)
                if target is None or target.role != FieldRole.INPUT:
                    raise ValueError(f"Side {side_name!r} must map to an input field, got {field_name!r}")
        return self

    def model_post_init(self, __context: Any) -> None:
        self._by_name = {spec.name: spec for spec in self.fields}
        model_name = "".join(part.capitalize() for part in re.split(r"[-_]", self.tool_id)) + "State"
        self._state_model = create_model(
            model_name,
            __config__=ConfigDict(frozen=True, strict=True, extra="forbid"),
            **{spec.name: (spec.python_type, spec.default) for spec in self.fields},
        )

    # --- Field lookup ---

    @property
    def state_model(self) -> type[BaseModel]:
        return self._state_model

    @property
    def field_names(self) -> list[str]:
        return [spec.name for spec in self.fields]

    @property
    def input_fields(self) -> list[str]:
        return [spec.name for spec in self.fields if spec.role == FieldRole.INPUT]

    @property
    def param_fields(self) -> list[str]:
        return [spec.name for spec in self.fields if spec.role == FieldRole.PARAM]

    def field(self, name: str) -> FieldSpec:
        try:
            return self._by_name[name]
        except KeyError:
            raise UnknownFieldError(f"Tool {self.tool_id!r} has no field {name!r}") from None

    def has_field(self, name: str) -> bool:
        return name in self._by_name

    def recognized_keys(self, raw: Iterable[str]) -> list[str]:
        """Keys of ``raw`` that name a declared field."""
        return [key for key in raw if key in self._by_name]

    # --- Binding ---

    def defaults(self) -> ToolState:
        return self._state_model()

    def bind(self, raw: Mapping[str, Any]) -> ToolState:
        """
        Build a fully defaulted state from a loosely typed map.

        Args:
            raw: Values keyed by field name, as text or native values

        Returns:
            A state instance with every field defined
        """
        values: dict[str, Any] = {}
        for spec in self.fields:
            if spec.name not in raw:
                continue
            try:
                values[spec.name] = spec.coerce(raw[spec.name])
            except ValueError as e:
                logger.debug(f"Falling back to default for {self.tool_id}.{spec.name}: {e}")
        return self._state_model(**values)

    def coerce_field(self, name: str, value: Any) -> Any:
        """Coerce a live edit, raising instead of falling back."""
        spec = self.field(name)
        try:
            return spec.coerce(value)
        except ValueError as e:
            raise InvalidFieldValueError(str(e)) from e

    def replace(self, state: ToolState, **updates: Any) -> ToolState:
        """New state with coerced field updates applied."""
        coerced = {name: self.coerce_field(name, value) for name, value in updates.items()}
        return state.model_copy(update=coerced)

    def to_values(self, state: ToolState) -> dict[str, Any]:
        return state.model_dump()

    # --- Dual-pane helpers ---

    def active_input_field(self, state: ToolState) -> str | None:
        """Input field the user is currently typing into, if the tool has sides."""
        if self.input_side is None:
            return None
        side = getattr(state, self.input_side.side_key)
        return self.input_side.input_key_by_side.get(side)

    def active_side(self, state: ToolState) -> str | None:
        if self.input_side is None:
            return None
        return getattr(state, self.input_side.side_key)
