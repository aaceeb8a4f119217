"""RoadKV Document Format - Persisted Table Encoding.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.

The whole table is one JSON object::

    {
      "app:user": {"value": "alice", "expires_at": null},
      "app:token": {"value": "abc", "expires_at": 1700000060}
    }
"""

from __future__ import annotations

import json
from typing import Dict, Mapping

from roadkv_core.errors import SerializationError
from roadkv_core.kv.entry import Entry

INDENT = 2


def encode_table(entries: Mapping[str, Entry]) -> str:
    """Encode a table as a JSON document.

    Args:
        entries: Storage key -> entry

    Returns:
        Pretty-printed JSON text

    Raises:
        SerializationError: If a payload is not JSON-representable
    """
    try:
        return json.dumps(
            {key: entry.to_dict() for key, entry in entries.items()},
            indent=INDENT,
            allow_nan=False,
        )
    except (TypeError, ValueError) as e:
        raise SerializationError(f"Cannot encode table: {e}") from e


def decode_table(text: str) -> Dict[str, Entry]:
    """Decode a JSON document into a table.

    Blank documents decode to an empty table.

    Args:
        text: Document text

    Returns:
        Storage key -> entry

    Raises:
        SerializationError: If the document is malformed
    """
    if not text.strip():
        return {}

    try:
        data = json.loads(text)
    except ValueError as e:
        raise SerializationError(f"Malformed document: {e}") from e

    if not isinstance(data, dict):
        raise SerializationError(
            f"Document must be a JSON object, got {type(data).__name__}"
        )

    return {key: Entry.from_dict(raw) for key, raw in data.items()}


__all__ = ["encode_table", "decode_table"]
