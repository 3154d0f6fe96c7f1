# tests/schema/test_tool_schema.py
"""Tests for ToolSchema validation and binding."""

import pytest
from pydantic import ValidationError

from tool_state_sync.exceptions import InvalidFieldValueError, UnknownFieldError
from tool_state_sync.schema import FieldRole, FieldSpec, FieldType, InputSideConfig, ToolSchema


class TestSchemaConstruction:
    def test_state_model_name(self, text_schema):
        assert text_schema.state_model.__name__ == "UrlEscapeState"

    def test_field_partitions(self, base64_schema):
        assert base64_schema.input_fields == ["leftText", "rightText"]
        assert "padding" in base64_schema.param_fields
        assert "leftText" not in base64_schema.param_fields

    def test_invalid_tool_id(self):
        with pytest.raises(ValidationError):
            ToolSchema(tool_id="bad id!", fields=[FieldSpec(name="text")])

    def test_no_fields(self):
        with pytest.raises(ValidationError):
            ToolSchema(tool_id="empty", fields=[])

    def test_duplicate_names(self):
        with pytest.raises(ValidationError, match="Duplicate"):
            ToolSchema(tool_id="dup", fields=[FieldSpec(name="text"), FieldSpec(name="text")])


class TestInputSideValidation:
    def _fields(self):
        return [
            FieldSpec(name="leftText", role=FieldRole.INPUT),
            FieldSpec(name="rightText", role=FieldRole.INPUT),
            FieldSpec(name="activeSide", type=FieldType.ENUM, choices=("left", "right")),
            FieldSpec(name="flag", type=FieldType.BOOLEAN),
        ]

    def test_side_key_must_be_enum(self):
        with pytest.raises(ValidationError):
            ToolSchema(
                tool_id="t",
                fields=self._fields(),
                input_side=InputSideConfig(side_key="flag", input_key_by_side={"left": "leftText"}),
            )

    def test_side_must_map_to_input(self):
        with pytest.raises(ValidationError):
            ToolSchema(
                tool_id="t",
                fields=self._fields(),
                input_side=InputSideConfig(side_key="activeSide", input_key_by_side={"left": "flag"}),
            )

    def test_unknown_side_name(self):
        fields = self._fields()
        fields[2] = FieldSpec(name="activeSide", type=FieldType.ENUM, choices=("top", "bottom"))
        with pytest.raises(ValidationError):
            ToolSchema(
                tool_id="t",
                fields=fields,
                input_side=InputSideConfig(side_key="activeSide", input_key_by_side={"top": "leftText"}),
            )

    def test_side_must_be_a_choice(self):
        fields = self._fields()
        fields[2] = FieldSpec(name="activeSide", type=FieldType.ENUM, choices=("left",))
        with pytest.raises(ValidationError):
            ToolSchema(
                tool_id="t",
                fields=fields,
                input_side=InputSideConfig(
                    side_key="activeSide",
                    input_key_by_side={"left": "leftText", "right": "rightText"},
                ),
            )


class TestBinding:
    def test_defaults(self, text_schema):
        state = text_schema.defaults()
        assert state.text == ""
        assert state.mode == "encode"
        assert state.plusForSpace is False

    def test_bind_coerces_text(self, text_schema):
        state = text_schema.bind({"text": "a b", "mode": "decode", "plusForSpace": "1"})
        assert state.text == "a b"
        assert state.mode == "decode"
        assert state.plusForSpace is True

    def test_bind_ignores_unknown_keys(self, text_schema):
        state = text_schema.bind({"text": "x", "utm_source": "mail"})
        assert text_schema.to_values(state) == {"text": "x", "mode": "encode", "plusForSpace": False}

    def test_invalid_values_fall_back_to_default(self, base64_schema):
        state = base64_schema.bind({"encoding": "EBCDIC", "lineWidth": "wide", "padding": "maybe"})
        assert state.encoding == "UTF-8"
        assert state.lineWidth == 76
        assert state.padding is True

    def test_state_is_frozen(self, text_schema):
        state = text_schema.defaults()
        with pytest.raises(ValidationError):
            state.text = "changed"

    def test_replace(self, text_schema):
        state = text_schema.replace(text_schema.defaults(), text="hi", plusForSpace="true")
        assert state.text == "hi"
        assert state.plusForSpace is True

    def test_recognized_keys(self, text_schema):
        assert text_schema.recognized_keys({"text": "a", "ref": "b"}) == ["text"]


class TestFieldLookup:
    def test_unknown_field(self, text_schema):
        with pytest.raises(UnknownFieldError):
            text_schema.field("nope")

    def test_unknown_field_is_key_error(self, text_schema):
        with pytest.raises(KeyError):
            text_schema.coerce_field("nope", "x")

    def test_invalid_value(self, text_schema):
        with pytest.raises(InvalidFieldValueError):
            text_schema.coerce_field("mode", "sideways")

    def test_has_field(self, text_schema):
        assert text_schema.has_field("text")
        assert not text_schema.has_field("nope")


class TestActiveSide:
    def test_no_sides(self, text_schema):
        state = text_schema.defaults()
        assert text_schema.active_input_field(state) is None
        assert text_schema.active_side(state) is None

    def test_left_is_default(self, base64_schema):
        state = base64_schema.defaults()
        assert base64_schema.active_side(state) == "left"
        assert base64_schema.active_input_field(state) == "leftText"

    def test_switch_side(self, base64_schema):
        state = base64_schema.bind({"activeSide": "right"})
        assert base64_schema.active_input_field(state) == "rightText"
