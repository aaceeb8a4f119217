"""RoadKV File Backend - Single-File JSON Persistence.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import contextlib
import logging
import os
import shutil
from pathlib import Path
from typing import Optional, Union

from roadkv_core.errors import SerializationError
from roadkv_core.store.backend import StorageBackend, StorageConfig

logger = logging.getLogger(__name__)


class FileBackend(StorageBackend):
    """File-based persistence backend.

    Keeps the whole table in one JSON file. Writes go to a ``.tmp``
    sibling that is then renamed over the file, so a reader of the file
    sees either the old or the new contents, never a torn write. With
    backups on, the previous file is copied to a ``.bak`` sibling first.

    Example:
        backend = FileBackend("settings.json")
        backend.save({"theme": Entry(value="dark")}, backup=True)
        # settings.json, settings.bak
    """

    ENCODING = "utf-8"

    def __init__(
        self,
        path: Union[str, os.PathLike],
        config: Optional[StorageConfig] = None,
    ):
        """Initialize file backend.

        Args:
            path: Document path
            config: Storage configuration

        Raises:
            ValueError: If the path would collide with its own
                .tmp or .bak sibling
        """
        super().__init__(config)
        self.path = Path(path)

        if self.path.suffix in (".tmp", ".bak"):
            raise ValueError(
                f"{self.path} collides with its {self.path.suffix} sibling"
            )

    @property
    def locator(self) -> str:
        return str(self.path)

    @property
    def backup_path(self) -> Path:
        return self.path.with_suffix(".bak")

    @property
    def temp_path(self) -> Path:
        return self.path.with_suffix(".tmp")

    def exists(self) -> bool:
        return self.path.exists()

    def read(self) -> Optional[str]:
        try:
            data = self.path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise self._fail("reading", e) from e

        self._stats.reads += 1
        try:
            return data.decode(self.ENCODING)
        except UnicodeDecodeError as e:
            raise SerializationError(f"{self.path} is not valid {self.ENCODING}: {e}") from e

    def write(self, text: str) -> None:
        temp_path = self.temp_path

        try:
            # Atomic write
            with open(temp_path, "w", encoding=self.ENCODING) as f:
                f.write(text)
            os.replace(temp_path, self.path)
        except OSError as e:
            with contextlib.suppress(OSError):
                temp_path.unlink()
            raise self._fail("writing", e) from e

        self._stats.writes += 1

    def backup(self) -> bool:
        if not self.path.exists():
            return False

        try:
            shutil.copyfile(self.path, self.backup_path)
        except OSError as e:
            raise self._fail("backing up", e) from e

        logger.debug(f"Backed up {self.path} to {self.backup_path}")
        return True

    def __repr__(self) -> str:
        return f"FileBackend(path={self.path})"


__all__ = ["FileBackend"]
