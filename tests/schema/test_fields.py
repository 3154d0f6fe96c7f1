# tests/schema/test_fields.py
"""Tests for FieldSpec declaration checks, coercion and serialization."""

import math

import pytest
from pydantic import ValidationError

from tool_state_sync.schema import FieldRole, FieldSpec, FieldType


class TestFieldDefaults:
    def test_string_default(self):
        assert FieldSpec(name="text").default == ""

    def test_boolean_default(self):
        assert FieldSpec(name="flag", type=FieldType.BOOLEAN).default is False

    def test_number_default(self):
        assert FieldSpec(name="width", type=FieldType.NUMBER).default == 0

    def test_enum_default_is_first_choice(self):
        spec = FieldSpec(name="mode", type=FieldType.ENUM, choices=("encode", "decode"))
        assert spec.default == "encode"

    def test_explicit_false_default_kept(self):
        spec = FieldSpec(name="flag", type=FieldType.BOOLEAN, default=False)
        assert spec.default is False

    def test_role_defaults_to_param(self):
        assert FieldSpec(name="flag", type=FieldType.BOOLEAN).role == FieldRole.PARAM


class TestFieldDeclaration:
    @pytest.mark.parametrize("name", ["_hidden", "model_name", "1st", "has space", "copy"])
    def test_invalid_names_rejected(self, name):
        with pytest.raises(ValidationError):
            FieldSpec(name=name)

    def test_enum_without_choices_rejected(self):
        with pytest.raises(ValidationError):
            FieldSpec(name="mode", type=FieldType.ENUM)

    def test_non_string_input_rejected(self):
        with pytest.raises(ValidationError):
            FieldSpec(name="count", type=FieldType.NUMBER, role=FieldRole.INPUT)

    def test_illegal_default_rejected(self):
        with pytest.raises(ValidationError):
            FieldSpec(name="mode", type=FieldType.ENUM, choices=("a", "b"), default="c")

    def test_default_rejected_by_validator(self):
        with pytest.raises(ValidationError):
            FieldSpec(name="width", type=FieldType.NUMBER, default=0, validator=lambda v: v > 0)


class TestCoerce:
    def test_string_passes_through(self):
        assert FieldSpec(name="text").coerce("  a b ") == "  a b "

    def test_string_rejects_other_types(self):
        with pytest.raises(ValueError):
            FieldSpec(name="text").coerce(3)

    @pytest.mark.parametrize("raw,expected", [
        ("true", True), ("1", True), ("TRUE", True), ("false", False), ("0", False),
        (True, True), (False, False),
    ])
    def test_boolean(self, raw, expected):
        assert FieldSpec(name="flag", type=FieldType.BOOLEAN).coerce(raw) is expected

    @pytest.mark.parametrize("raw", ["yes", "", "2", 1, None])
    def test_boolean_rejects(self, raw):
        with pytest.raises(ValueError):
            FieldSpec(name="flag", type=FieldType.BOOLEAN).coerce(raw)

    def test_number_from_text(self):
        spec = FieldSpec(name="width", type=FieldType.NUMBER)
        assert spec.coerce("76") == 76
        assert isinstance(spec.coerce("76"), int)
        assert spec.coerce("2.5") == 2.5
        assert spec.coerce(" -3 ") == -3

    def test_number_native(self):
        spec = FieldSpec(name="width", type=FieldType.NUMBER)
        assert spec.coerce(4) == 4
        assert spec.coerce(0.5) == 0.5

    @pytest.mark.parametrize("raw", ["abc", "", "inf", "nan", math.inf, True])
    def test_number_rejects(self, raw):
        with pytest.raises(ValueError):
            FieldSpec(name="width", type=FieldType.NUMBER).coerce(raw)

    def test_enum(self):
        spec = FieldSpec(name="mode", type=FieldType.ENUM, choices=("encode", "decode"))
        assert spec.coerce("decode") == "decode"
        with pytest.raises(ValueError):
            spec.coerce("DECODE")

    def test_validator_runs_after_type_check(self):
        spec = FieldSpec(name="width", type=FieldType.NUMBER, default=76, validator=lambda v: v > 0)
        assert spec.coerce("10") == 10
        with pytest.raises(ValueError):
            spec.coerce("-1")


class TestSerialize:
    def test_boolean(self):
        spec = FieldSpec(name="flag", type=FieldType.BOOLEAN)
        assert spec.serialize(True) == "true"
        assert spec.serialize(False) == "false"

    def test_number(self):
        spec = FieldSpec(name="width", type=FieldType.NUMBER)
        assert spec.serialize(76) == "76"
        assert spec.serialize(2.5) == "2.5"

    def test_serialize_then_coerce_is_identity(self):
        spec = FieldSpec(name="width", type=FieldType.NUMBER)
        for value in (0, -12, 0.1, 1e-7, 123456789012):
            assert spec.coerce(spec.serialize(value)) == value

    def test_string_and_enum(self):
        assert FieldSpec(name="text").serialize("a&b") == "a&b"
        spec = FieldSpec(name="mode", type=FieldType.ENUM, choices=("x", "y"))
        assert spec.serialize("y") == "y"
