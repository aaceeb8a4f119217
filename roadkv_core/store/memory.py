"""RoadKV Memory Backend - In-Process Persistence.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
from typing import Optional

from roadkv_core.store.backend import StorageBackend, StorageConfig

logger = logging.getLogger(__name__)


class MemoryBackend(StorageBackend):
    """In-memory persistence backend.

    Holds the last saved document and the last backup snapshot in the
    process. Nothing survives the process, but save/reload behave exactly
    as with a file, which makes it the backend for in-memory stores and
    for sharing one "medium" between several store instances.

    Example:
        backend = MemoryBackend()
        a = KVStore(backend, StoreConfig(namespace="a"))
        b = KVStore(backend, StoreConfig(namespace="b"))
    """

    def __init__(
        self,
        document: Optional[str] = None,
        config: Optional[StorageConfig] = None,
    ):
        """Initialize memory backend.

        Args:
            document: Initial document text, None for no document
            config: Storage configuration
        """
        super().__init__(config or StorageConfig(name="memory"))
        self.document = document
        self.backup_document: Optional[str] = None

    @property
    def locator(self) -> str:
        return f"memory://{self.config.name}"

    def exists(self) -> bool:
        return self.document is not None

    def read(self) -> Optional[str]:
        if self.document is None:
            return None
        self._stats.reads += 1
        return self.document

    def write(self, text: str) -> None:
        self.document = text
        self._stats.writes += 1

    def backup(self) -> bool:
        if self.document is None:
            return False
        self.backup_document = self.document
        return True

    def __repr__(self) -> str:
        size = len(self.document) if self.document is not None else 0
        return f"MemoryBackend(name={self.config.name!r}, bytes={size})"


__all__ = ["MemoryBackend"]
