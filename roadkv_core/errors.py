"""RoadKV Errors - Exception Hierarchy.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations


class StoreError(Exception):
    """Base class for all RoadKV errors."""


class StorageIOError(StoreError):
    """Storage medium failure (read, write, rename or backup copy).

    The underlying ``OSError`` or client error is chained as ``__cause__``.
    """


class SerializationError(StoreError):
    """Value codec failure or malformed persisted document."""


class TimeError(StoreError):
    """System clock reports a time before the UNIX epoch."""


__all__ = ["StoreError", "StorageIOError", "SerializationError", "TimeError"]
