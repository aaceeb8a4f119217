"""RoadKV Storage Backend - Abstract Persistence Interface.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Mapping, Optional

from roadkv_core.errors import StorageIOError
from roadkv_core.kv.entry import Entry
from roadkv_core.protocol.format import decode_table, encode_table

logger = logging.getLogger(__name__)


@dataclass
class StorageConfig:
    """Storage backend configuration.

    Attributes:
        name: Backend name, used in logs
    """

    name: str = "storage"


@dataclass
class StorageStats:
    """Storage backend statistics.

    Attributes:
        reads: Number of document reads
        writes: Number of document writes
        backups: Number of backup snapshots taken
        errors: Number of errors
    """

    reads: int = 0
    writes: int = 0
    backups: int = 0
    errors: int = 0
    last_error: Optional[str] = None
    last_error_at: Optional[datetime] = None

    def record_error(self, error: str) -> None:
        """Record an error."""
        self.errors += 1
        self.last_error = error
        self.last_error_at = datetime.now()


class StorageBackend(ABC):
    """Abstract persistence backend for a store's table.

    A backend owns one document: the whole table encoded as JSON. Saving
    follows the same steps everywhere:

    1. If backups are on and a document already exists, snapshot it.
    2. Encode the table.
    3. Replace the document in one visible step.

    Implementations provide the medium primitives:
    - FileBackend: local file with ``.tmp`` + rename and ``.bak`` sibling
    - MemoryBackend: in-process document
    - RedisBackend: document under a Redis key
    """

    def __init__(self, config: Optional[StorageConfig] = None):
        """Initialize backend.

        Args:
            config: Storage configuration
        """
        self.config = config or StorageConfig()
        self._stats = StorageStats()

    @abstractmethod
    def read(self) -> Optional[str]:
        """Read the whole document.

        Returns:
            Document text, or None if no document exists yet

        Raises:
            StorageIOError: On any other medium failure
        """
        pass

    @abstractmethod
    def write(self, text: str) -> None:
        """Atomically replace the document.

        Args:
            text: New document text

        Raises:
            StorageIOError: On medium failure
        """
        pass

    @abstractmethod
    def backup(self) -> bool:
        """Snapshot the current document, if one exists.

        Returns:
            True if a snapshot was taken

        Raises:
            StorageIOError: If copying fails
        """
        pass

    @abstractmethod
    def exists(self) -> bool:
        """Check if a document exists."""
        pass

    @property
    @abstractmethod
    def locator(self) -> str:
        """Human-readable location of the document."""
        pass

    def load(self) -> Dict[str, Entry]:
        """Load the table.

        A missing or blank document is an empty table.

        Returns:
            Storage key -> entry

        Raises:
            StorageIOError: If the medium fails
            SerializationError: If the document is malformed
        """
        text = self.read()
        if text is None:
            logger.debug(f"No document at {self.locator}, starting empty")
            return {}

        entries = decode_table(text)
        logger.debug(f"Loaded {len(entries)} entries from {self.locator}")
        return entries

    def save(self, entries: Mapping[str, Entry], backup: bool = False) -> None:
        """Persist the table.

        Args:
            entries: Storage key -> entry
            backup: Snapshot the previous document first

        Raises:
            StorageIOError: If the medium fails
            SerializationError: If the table cannot be encoded
        """
        if backup and self.backup():
            self._stats.backups += 1

        text = encode_table(entries)
        self.write(text)
        logger.debug(f"Saved {len(entries)} entries to {self.locator}")

    def _fail(self, action: str, error: Exception) -> StorageIOError:
        """Record a medium failure and build the error to raise."""
        logger.error(f"Error {action} {self.locator}: {error}")
        self._stats.record_error(str(error))
        return StorageIOError(f"Error {action} {self.locator}: {error}")

    def get_stats(self) -> StorageStats:
        return self._stats

    def reset_stats(self) -> None:
        self._stats = StorageStats()


__all__ = ["StorageBackend", "StorageConfig", "StorageStats"]
