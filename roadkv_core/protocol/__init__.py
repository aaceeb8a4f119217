"""Protocol module - Value codecs and the persisted document format."""

from roadkv_core.protocol.serializer import (
    Serializer,
    JSONSerializer,
    JSONStringSerializer,
    get_serializer,
    register_serializer,
)
from roadkv_core.protocol.format import encode_table, decode_table

__all__ = [
    "Serializer",
    "JSONSerializer",
    "JSONStringSerializer",
    "get_serializer",
    "register_serializer",
    "encode_table",
    "decode_table",
]
