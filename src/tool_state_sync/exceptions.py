"""Exception hierarchy for tool-state-sync."""


class ToolStateError(Exception):
    """Base exception for all tool-state errors."""


# Schema / live edits
class UnknownFieldError(ToolStateError, KeyError):
    """A field name that the tool schema does not declare."""


class InvalidFieldValueError(ToolStateError, ValueError):
    """A value that cannot be coerced to the field's declared type."""


# Persistence
class StorageError(ToolStateError):
    """The embedded key/value store is unavailable or a read/write failed."""
