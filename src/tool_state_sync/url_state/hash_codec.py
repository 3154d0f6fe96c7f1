# tool_state_sync/url_state/hash_codec.py
"""
Compact share fragments: JSON, gzip-compressed, URL-safe base64 without
padding. Used when a whole state is shared as one opaque token rather
than as individual query parameters.
"""

from __future__ import annotations

import base64
import binascii
import gzip
import json
import logging
import zlib
from typing import Any

from tool_state_sync.schema import ToolSchema, ToolState

logger = logging.getLogger(__name__)

COMPRESSION_LEVEL = 9


def compress_state(state: Any) -> str:
    payload = json.dumps(state, separators=(",", ":"), ensure_ascii=False).encode("utf-8")
    compressed = gzip.compress(payload, compresslevel=COMPRESSION_LEVEL, mtime=0)
    return base64.urlsafe_b64encode(compressed).decode("ascii").rstrip("=")


def decompress_state(token: str) -> Any | None:
    """Inverse of :func:`compress_state`. Returns None for any bad token."""
    try:
        padded = token + "=" * (-len(token) % 4)
        compressed = base64.urlsafe_b64decode(padded.encode("ascii"))
        return json.loads(gzip.decompress(compressed).decode("utf-8"))
    except (binascii.Error, OSError, EOFError, zlib.error, UnicodeError, ValueError) as e:
        logger.warning(f"Failed to decompress state: {e}")
        return None


def encode_fragment(schema: ToolSchema, state: ToolState) -> str:
    return compress_state(schema.to_values(state))


def decode_fragment(schema: ToolSchema, fragment: str) -> dict[str, Any]:
    """Recognized raw values carried by a fragment; empty when unusable."""
    text = fragment[1:] if fragment.startswith("#") else fragment
    if not text:
        return {}
    decoded = decompress_state(text)
    if not isinstance(decoded, dict):
        return {}
    return {key: decoded[key] for key in schema.recognized_keys(decoded)}
