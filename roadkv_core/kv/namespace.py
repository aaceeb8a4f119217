"""RoadKV Namespace - Key Prefixing for Logical Stores.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations


class Namespace:
    """Maps logical keys to storage keys and back.

    A non-empty namespace always ends with a single separator, so
    ``Namespace("users").apply("1") == "users:1"``. The empty namespace
    leaves keys untouched, which lets several logical stores share one
    physical table.
    """

    SEPARATOR = ":"

    def __init__(self, name: str = ""):
        """Initialize namespace.

        Args:
            name: Namespace name, with or without trailing separator
        """
        self.prefix = self.normalize(name)

    @classmethod
    def normalize(cls, name: str) -> str:
        """Normalize a namespace name to its prefix form.

        Args:
            name: Raw namespace name

        Returns:
            Empty string, or name ending with the separator
        """
        if not name or name.endswith(cls.SEPARATOR):
            return name
        return f"{name}{cls.SEPARATOR}"

    @property
    def is_empty(self) -> bool:
        return not self.prefix

    def apply(self, key: str) -> str:
        """Make storage key from logical key."""
        if not self.prefix:
            return key
        return f"{self.prefix}{key}"

    def strip(self, key: str) -> str:
        """Make logical key from storage key.

        Keys outside this namespace are returned unchanged.
        """
        if self.prefix and key.startswith(self.prefix):
            return key[len(self.prefix):]
        return key

    def owns(self, key: str) -> bool:
        """Check if a storage key belongs to this namespace."""
        return key.startswith(self.prefix)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Namespace):
            return NotImplemented
        return self.prefix == other.prefix

    def __hash__(self) -> int:
        return hash(self.prefix)

    def __str__(self) -> str:
        return self.prefix

    def __repr__(self) -> str:
        return f"Namespace(prefix={self.prefix!r})"


__all__ = ["Namespace"]
