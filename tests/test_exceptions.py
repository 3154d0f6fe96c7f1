# tests/test_exceptions.py
"""Tests for the exception hierarchy."""

import pytest

from tool_state_sync.exceptions import (
    InvalidFieldValueError,
    StorageError,
    ToolStateError,
    UnknownFieldError,
)


@pytest.mark.parametrize("exc_type", [InvalidFieldValueError, StorageError, UnknownFieldError])
def test_all_errors_share_base(exc_type):
    assert issubclass(exc_type, ToolStateError)


def test_unknown_field_is_key_error():
    with pytest.raises(KeyError):
        raise UnknownFieldError("missing")


def test_invalid_value_is_value_error():
    with pytest.raises(ValueError):
        raise InvalidFieldValueError("bad")
