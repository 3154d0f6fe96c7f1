# tool_state_sync/url_state/__init__.py
"""Address-bar representations of tool state."""

from tool_state_sync.url_state.hash_codec import (
    compress_state,
    decode_fragment,
    decompress_state,
    encode_fragment,
)
from tool_state_sync.url_state.mirror import (
    FieldProjection,
    MirrorProjection,
    decode_query,
    decode_state,
    encode_query,
    encode_state,
    project_field,
    project_state,
    serialize_field,
    serialized_size,
)

__all__ = [
    "FieldProjection",
    "MirrorProjection",
    "compress_state",
    "decode_fragment",
    "decode_query",
    "decode_state",
    "decompress_state",
    "encode_fragment",
    "encode_query",
    "encode_state",
    "project_field",
    "project_state",
    "serialize_field",
    "serialized_size",
]
