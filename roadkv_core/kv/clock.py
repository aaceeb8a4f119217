"""RoadKV Clock - Time Sources for Expiration.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import time
from abc import ABC, abstractmethod

from roadkv_core.errors import TimeError


class Clock(ABC):
    """Source of the current UNIX time in whole seconds."""

    @abstractmethod
    def now(self) -> int:
        """Get current UNIX time.

        Returns:
            Seconds since the epoch

        Raises:
            TimeError: If the time is before the epoch
        """
        pass


class SystemClock(Clock):
    """Wall clock backed by ``time.time()``."""

    def now(self) -> int:
        seconds = int(time.time())
        if seconds < 0:
            raise TimeError("System time is before the UNIX epoch")
        return seconds

    def __repr__(self) -> str:
        return "SystemClock()"


class ManualClock(Clock):
    """Clock that only moves when told to.

    Example:
        clock = ManualClock(1_700_000_000)
        kv = KVStore.in_memory(clock=clock)
        kv.set_with_ttl("token", "abc", 60)
        clock.advance(61)
    """

    def __init__(self, start: int = 0):
        self._now = start

    def now(self) -> int:
        if self._now < 0:
            raise TimeError("Clock is before the UNIX epoch")
        return self._now

    def advance(self, seconds: int) -> int:
        """Move the clock forward and return the new time."""
        self._now += seconds
        return self._now

    def set(self, seconds: int) -> None:
        """Jump to an absolute time."""
        self._now = seconds

    def __repr__(self) -> str:
        return f"ManualClock(now={self._now})"


__all__ = ["Clock", "SystemClock", "ManualClock"]
