# tool_state_sync/url_state/mirror.py
"""
Address-bar mirror: projection of a tool state into flat key=value pairs.

Fields at their default are omitted, so an absent key always means
"use the default". Fields whose serialized form is larger than the
oversize threshold are omitted too and reported back to the caller.
"""

from __future__ import annotations

import logging
from urllib.parse import parse_qsl, urlencode

from pydantic import BaseModel, Field

from tool_state_sync.config import OVERSIZE_THRESHOLD_BYTES
from tool_state_sync.schema import FieldSpec, ToolSchema, ToolState

logger = logging.getLogger(__name__)


class MirrorProjection(BaseModel):
    """Mirror params plus the fields that were kept out for size."""

    params: dict[str, str] = Field(default_factory=dict)
    oversize: set[str] = Field(default_factory=set)


class FieldProjection(BaseModel):
    """Mirror outcome for a single field."""

    name: str
    text: str | None = None  # None: key is absent from the mirror
    oversize: bool = False


def serialized_size(text: str) -> int:
    """Size of a serialized value in UTF-8 bytes."""
    return len(text.encode("utf-8"))


def serialize_field(spec: FieldSpec, value: object) -> str:
    """Text form of a field value as written to the address bar."""
    return spec.serialize(value)


def project_field(
    spec: FieldSpec,
    value: object,
    threshold: int = OVERSIZE_THRESHOLD_BYTES,
) -> FieldProjection:
    """
    Decide how one field appears in the mirror.

    Serialization failures are treated like oversize values: the field
    stays usable in memory but is not shared.
    """
    if value == spec.default:
        return FieldProjection(name=spec.name)
    try:
        text = serialize_field(spec, value)
        size = serialized_size(text)
    except (UnicodeError, ValueError, TypeError) as e:
        logger.debug(f"Excluding {spec.name} from mirror, serialization failed: {e}")
        return FieldProjection(name=spec.name, oversize=True)
    if size > threshold:
        return FieldProjection(name=spec.name, oversize=True)
    return FieldProjection(name=spec.name, text=text)


def project_state(
    schema: ToolSchema,
    state: ToolState,
    threshold: int = OVERSIZE_THRESHOLD_BYTES,
) -> MirrorProjection:
    projection = MirrorProjection()
    for spec in schema.fields:
        result = project_field(spec, getattr(state, spec.name), threshold)
        if result.oversize:
            projection.oversize.add(spec.name)
        elif result.text is not None:
            projection.params[spec.name] = result.text
    return projection


def encode_query(params: dict[str, str]) -> str:
    """Percent-encoded query string, without the leading ``?``."""
    return urlencode(params)


def decode_query(query: str) -> dict[str, str]:
    """
    Parse a query string into flat pairs.

    Malformed pairs are dropped; for repeated keys the last value wins.
    """
    text = query[1:] if query.startswith("?") else query
    pairs: dict[str, str] = {}
    for chunk in text.split("&"):
        if not chunk:
            continue
        try:
            parsed = parse_qsl(chunk, keep_blank_values=True, errors="strict")
        except (UnicodeError, ValueError) as e:
            logger.debug(f"Ignoring malformed query pair {chunk!r}: {e}")
            continue
        pairs.update(parsed)
    return pairs


def encode_state(
    schema: ToolSchema,
    state: ToolState,
    threshold: int = OVERSIZE_THRESHOLD_BYTES,
) -> str:
    return encode_query(project_state(schema, state, threshold).params)


def decode_state(schema: ToolSchema, query: str) -> ToolState:
    return schema.bind(decode_query(query))
