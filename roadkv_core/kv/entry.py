"""RoadKV Entry - Stored Entry and Expiration Policy.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from roadkv_core.errors import SerializationError


def is_expired(entry: "Entry", now: int) -> bool:
    """Check whether an entry has expired at ``now``.

    An entry expiring exactly at ``now`` is still alive for that second.

    Args:
        entry: Stored entry
        now: Current UNIX time in seconds

    Returns:
        True if expired
    """
    return entry.expires_at is not None and now > entry.expires_at


@dataclass
class Entry:
    """A stored value with optional expiry.

    Attributes:
        value: Serialized payload produced by the value codec
        expires_at: UNIX timestamp (seconds) after which the entry is dead,
            or None to never expire
    """

    value: Any
    expires_at: Optional[int] = None

    def is_expired(self, now: int) -> bool:
        """Check if entry has expired."""
        return is_expired(self, now)

    def is_alive(self, now: int) -> bool:
        """Check if entry is still alive."""
        return not is_expired(self, now)

    @property
    def has_ttl(self) -> bool:
        """Check if entry carries an expiry."""
        return self.expires_at is not None

    def remaining_ttl(self, now: int) -> Optional[int]:
        """Get remaining TTL in seconds.

        Args:
            now: Current UNIX time in seconds

        Returns:
            Seconds left (never negative), or None without expiry
        """
        if self.expires_at is None:
            return None
        return max(0, self.expires_at - now)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the persisted representation."""
        return {"value": self.value, "expires_at": self.expires_at}

    @classmethod
    def from_dict(cls, data: Any) -> "Entry":
        """Create from the persisted representation.

        Args:
            data: Decoded JSON object

        Returns:
            Entry instance

        Raises:
            SerializationError: If the object is not a valid entry
        """
        if not isinstance(data, dict) or "value" not in data:
            raise SerializationError(f"Malformed entry: {data!r}")

        expires_at = data.get("expires_at")
        if expires_at is not None and (
            isinstance(expires_at, bool) or not isinstance(expires_at, int)
        ):
            raise SerializationError(f"Malformed expires_at: {expires_at!r}")

        return cls(value=data["value"], expires_at=expires_at)


__all__ = ["Entry", "is_expired"]
