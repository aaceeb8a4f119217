"""Store module - Persistence backends for the entry table."""

from roadkv_core.store.backend import (
    StorageBackend,
    StorageStats,
    StorageConfig,
)
from roadkv_core.store.memory import MemoryBackend
from roadkv_core.store.file import FileBackend
from roadkv_core.store.redis import RedisBackend, RedisConfig

__all__ = [
    "StorageBackend",
    "StorageStats",
    "StorageConfig",
    "MemoryBackend",
    "FileBackend",
    "RedisBackend",
    "RedisConfig",
]
