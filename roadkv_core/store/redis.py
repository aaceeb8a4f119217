"""RoadKV Redis Backend - Key-Value Service Persistence.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

from roadkv_core.errors import SerializationError
from roadkv_core.store.backend import StorageBackend, StorageConfig

logger = logging.getLogger(__name__)


@dataclass
class RedisConfig(StorageConfig):
    """Redis-specific configuration.

    Attributes:
        host: Redis host
        port: Redis port
        db: Redis database number
        password: Redis password
        socket_timeout: Socket timeout
        socket_connect_timeout: Connection timeout
        ssl: Enable SSL
    """

    name: str = "redis"
    host: str = "localhost"
    port: int = 6379
    db: int = 0
    password: Optional[str] = None
    socket_timeout: float = 5.0
    socket_connect_timeout: float = 5.0
    ssl: bool = False


class RedisBackend(StorageBackend):
    """Redis persistence backend.

    The whole table is one string value under ``"<prefix>:data"``; the
    backup snapshot lives under ``"<prefix>:bak"``. A single SET replaces
    the value atomically, so no temporary key is involved.

    Example:
        backend = RedisBackend("myapp", config=RedisConfig(host="redis.local"))
        kv = KVStore(backend, StoreConfig(auto_save=True))
    """

    ENCODING = "utf-8"

    def __init__(
        self,
        prefix: str,
        client: Optional[Any] = None,
        config: Optional[RedisConfig] = None,
    ):
        """Initialize Redis backend.

        Args:
            prefix: Key prefix for the document
            client: Existing redis client; created lazily when None
            config: Redis configuration
        """
        super().__init__(config)
        self.config: RedisConfig = config or RedisConfig()
        self.prefix = prefix
        self._client = client

    @property
    def data_key(self) -> str:
        return f"{self.prefix}:data"

    @property
    def backup_key(self) -> str:
        return f"{self.prefix}:bak"

    @property
    def locator(self) -> str:
        return f"redis://{self.config.host}:{self.config.port}/{self.config.db}/{self.data_key}"

    def _ensure_connected(self) -> Any:
        """Ensure Redis connection exists.

        Returns:
            Redis client
        """
        if self._client is not None:
            return self._client

        try:
            import redis
        except ImportError:
            raise ImportError("Redis package not installed. Run: pip install roadkv[redis]")

        self._client = redis.Redis(
            host=self.config.host,
            port=self.config.port,
            db=self.config.db,
            password=self.config.password,
            socket_timeout=self.config.socket_timeout,
            socket_connect_timeout=self.config.socket_connect_timeout,
            ssl=self.config.ssl,
        )
        logger.info(f"Connected to Redis at {self.config.host}:{self.config.port}")
        return self._client

    def _decode(self, data: Any) -> str:
        if isinstance(data, bytes):
            try:
                return data.decode(self.ENCODING)
            except UnicodeDecodeError as e:
                raise SerializationError(f"{self.data_key} is not valid {self.ENCODING}: {e}") from e
        return data

    def exists(self) -> bool:
        client = self._ensure_connected()
        try:
            return bool(client.exists(self.data_key))
        except Exception as e:
            raise self._fail("checking", e) from e

    def read(self) -> Optional[str]:
        client = self._ensure_connected()
        try:
            data = client.get(self.data_key)
        except Exception as e:
            raise self._fail("reading", e) from e

        if data is None:
            return None
        self._stats.reads += 1
        return self._decode(data)

    def write(self, text: str) -> None:
        client = self._ensure_connected()
        try:
            client.set(self.data_key, text.encode(self.ENCODING))
        except Exception as e:
            raise self._fail("writing", e) from e
        self._stats.writes += 1

    def backup(self) -> bool:
        client = self._ensure_connected()
        try:
            data = client.get(self.data_key)
            if data is None:
                return False
            client.set(self.backup_key, data)
        except Exception as e:
            raise self._fail("backing up", e) from e
        return True

    def __repr__(self) -> str:
        return f"RedisBackend(key={self.data_key!r})"


__all__ = ["RedisBackend", "RedisConfig"]
