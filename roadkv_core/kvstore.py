"""RoadKV Store - Main Key-Value Store Implementation.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import dataclasses
import logging
import os
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Iterator, List, Optional, Union

from roadkv_core.kv.clock import Clock, SystemClock
from roadkv_core.kv.entry import Entry
from roadkv_core.kv.namespace import Namespace
from roadkv_core.kv.table import EntryTable
from roadkv_core.protocol.format import encode_table
from roadkv_core.protocol.serializer import Serializer, get_serializer
from roadkv_core.store.backend import StorageBackend
from roadkv_core.store.file import FileBackend
from roadkv_core.store.memory import MemoryBackend
from roadkv_core.store.redis import RedisBackend, RedisConfig

logger = logging.getLogger(__name__)

_MISSING = object()


@dataclass
class StoreConfig:
    """Store configuration.

    Attributes:
        auto_save: Persist after every mutating call
        backup: Snapshot the previous document before each save
        namespace: Prefix applied to all logical keys
    """

    auto_save: bool = False
    backup: bool = False
    namespace: str = ""

    def __post_init__(self):
        self.namespace = Namespace.normalize(self.namespace)


@dataclass
class StoreStats:
    """Store statistics.

    Attributes:
        hits: Reads that returned a value
        misses: Reads that found nothing (including expired entries)
        sets: Set operations
        removes: Successful removals
        expirations: Entries dropped because they expired
        saves: Completed saves
        started_at: When the store was created
    """

    hits: int = 0
    misses: int = 0
    sets: int = 0
    removes: int = 0
    expirations: int = 0
    saves: int = 0
    started_at: Optional[datetime] = None

    @property
    def hit_rate(self) -> float:
        """Calculate hit rate."""
        total = self.hits + self.misses
        return self.hits / total if total > 0 else 0.0

    def reset(self) -> None:
        """Reset statistics."""
        self.hits = 0
        self.misses = 0
        self.sets = 0
        self.removes = 0
        self.expirations = 0
        self.saves = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hits": self.hits,
            "misses": self.misses,
            "sets": self.sets,
            "removes": self.removes,
            "expirations": self.expirations,
            "saves": self.saves,
            "hit_rate": self.hit_rate,
        }


class KVStore:
    """Embedded persistent key-value store.

    Values go through a serializer into an in-memory table which a backend
    persists as one JSON document. Entries may carry a TTL, keys may be
    namespaced, and every mutation may be saved immediately.

    Expired entries are dropped lazily: ``get`` removes an expired entry it
    finds and, with auto-save on, persists that removal before returning.
    So ``get`` can raise ``StorageIOError`` even though it is a lookup.
    ``contains_key``, ``keys`` and ``size`` never mutate.

    With auto-save on, a mutation is applied in memory before it is saved.
    If the save fails the error reaches the caller and memory stays ahead
    of disk until the next successful save; nothing is rolled back.

    Example:
        with KVStore.open("settings.json", auto_save=True) as kv:
            kv.set("username", "alice")
            kv.set_with_ttl("session", "abc123", 60)
            user = kv.get("username")
    """

    def __init__(
        self,
        backend: Optional[StorageBackend] = None,
        config: Optional[StoreConfig] = None,
        serializer: Optional[Serializer] = None,
        clock: Optional[Clock] = None,
        table: Optional[EntryTable] = None,
    ):
        """Initialize store.

        Args:
            backend: Persistence backend (in-memory if omitted)
            config: Store configuration
            serializer: Value codec (JSON if omitted)
            clock: Time source (system clock if omitted)
            table: Share an existing table instead of loading one

        Raises:
            StorageIOError: If the backend cannot be read
            SerializationError: If the persisted document is malformed
        """
        self.config = config or StoreConfig()
        self._backend = backend or MemoryBackend()
        self._serializer = serializer or get_serializer()
        self._clock = clock or SystemClock()
        self._namespace = Namespace(self.config.namespace)

        if table is None:
            table = EntryTable(self._backend.load())
        self._table = table

        self._stats = StoreStats(started_at=datetime.now())
        self._closed = False

    @classmethod
    def open(
        cls,
        path: Union[str, os.PathLike],
        config: Optional[StoreConfig] = None,
        serializer: Optional[Serializer] = None,
        clock: Optional[Clock] = None,
        **options,
    ) -> "KVStore":
        """Open or create a file-backed store.

        A missing file gives an empty store; the file is created on the
        first save.

        Args:
            path: Document path
            config: Store configuration
            serializer: Value codec
            clock: Time source
            **options: StoreConfig fields, used when config is omitted

        Returns:
            KVStore instance
        """
        store = cls(
            FileBackend(path),
            config or StoreConfig(**options),
            serializer=serializer,
            clock=clock,
        )
        logger.info(f"Opened {path} with {len(store._table)} entries")
        return store

    @classmethod
    def in_memory(
        cls,
        config: Optional[StoreConfig] = None,
        serializer: Optional[Serializer] = None,
        clock: Optional[Clock] = None,
        **options,
    ) -> "KVStore":
        """Create an empty store that never touches disk."""
        return cls(
            MemoryBackend(),
            config or StoreConfig(**options),
            serializer=serializer,
            clock=clock,
        )

    @classmethod
    def from_data(
        cls,
        data: str,
        config: Optional[StoreConfig] = None,
        serializer: Optional[Serializer] = None,
        clock: Optional[Clock] = None,
        **options,
    ) -> "KVStore":
        """Create an in-memory store from a serialized document.

        Args:
            data: Document text, as produced by ``to_data``

        Returns:
            KVStore instance

        Raises:
            SerializationError: If the document is malformed
        """
        return cls(
            MemoryBackend(document=data),
            config or StoreConfig(**options),
            serializer=serializer,
            clock=clock,
        )

    @classmethod
    def open_redis(
        cls,
        prefix: str,
        client: Optional[Any] = None,
        redis_config: Optional[RedisConfig] = None,
        config: Optional[StoreConfig] = None,
        serializer: Optional[Serializer] = None,
        clock: Optional[Clock] = None,
        **options,
    ) -> "KVStore":
        """Open a store whose document lives in Redis.

        Args:
            prefix: Redis key prefix for the document
            client: Existing redis client
            redis_config: Connection settings when no client is given

        Returns:
            KVStore instance
        """
        store = cls(
            RedisBackend(prefix, client=client, config=redis_config),
            config or StoreConfig(**options),
            serializer=serializer,
            clock=clock,
        )
        logger.info(f"Opened Redis document {prefix!r} with {len(store._table)} entries")
        return store

    @property
    def backend(self) -> StorageBackend:
        return self._backend

    @property
    def namespace(self) -> str:
        return self._namespace.prefix

    def with_namespace(self, name: str) -> "KVStore":
        """Get a view of this store under another namespace.

        The view shares this store's table and backend, so several logical
        stores can live in one document.

        Args:
            name: Namespace name ("" for the raw key space)

        Returns:
            KVStore sharing the same table
        """
        return KVStore(
            self._backend,
            dataclasses.replace(self.config, namespace=name),
            serializer=self._serializer,
            clock=self._clock,
            table=self._table,
        )

    def set(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        """Set value in store.

        Args:
            key: Logical key
            value: Value to store
            ttl: Optional TTL in seconds, see ``set_with_ttl``

        Raises:
            SerializationError: If the value cannot be encoded
            StorageIOError: If auto-save fails (memory is already updated)
        """
        if ttl is not None:
            self.set_with_ttl(key, value, ttl)
            return

        payload = self._serializer.serialize(value)
        self._insert(key, Entry(value=payload))

    def set_with_ttl(self, key: str, value: Any, ttl_seconds: int) -> None:
        """Set value that expires ``ttl_seconds`` from now.

        The entry stays readable through the second it expires in.

        Args:
            key: Logical key
            value: Value to store
            ttl_seconds: Seconds to live, zero or more

        Raises:
            ValueError: If ttl_seconds is negative
            TimeError: If the clock is before the epoch
            SerializationError: If the value cannot be encoded
            StorageIOError: If auto-save fails (memory is already updated)
        """
        if ttl_seconds < 0:
            raise ValueError(f"TTL must not be negative: {ttl_seconds}")

        payload = self._serializer.serialize(value)
        expires_at = self._clock.now() + int(ttl_seconds)
        self._insert(key, Entry(value=payload, expires_at=expires_at))

    def get(self, key: str, default: Any = None) -> Any:
        """Get value from store.

        An expired entry is removed (and the removal saved, with
        auto-save on) and reported as missing.

        Args:
            key: Logical key
            default: Returned when the key is missing or expired

        Returns:
            Stored value or default

        Raises:
            SerializationError: If the stored payload cannot be decoded
            TimeError: If the clock is before the epoch
            StorageIOError: If saving a lazy eviction fails
        """
        storage_key = self._namespace.apply(key)
        entry = self._table.get(storage_key)

        if entry is None:
            self._stats.misses += 1
            return default

        if entry.has_ttl and entry.is_expired(self._clock.now()):
            self._table.remove(storage_key)
            self._stats.misses += 1
            self._stats.expirations += 1
            logger.debug(f"Evicted expired key {storage_key!r}")
            self._auto_save()
            return default

        value = self._serializer.deserialize(entry.value)
        self._stats.hits += 1
        return value

    def remove(self, key: str) -> bool:
        """Remove key from store.

        Args:
            key: Logical key

        Returns:
            True if something was removed
        """
        removed = self._table.remove(self._namespace.apply(key))
        if removed:
            self._stats.removes += 1
            self._auto_save()
        return removed

    def contains_key(self, key: str) -> bool:
        """Check if key exists and is alive. Never mutates."""
        entry = self._table.get(self._namespace.apply(key))
        if entry is None:
            return False
        if not entry.has_ttl:
            return True
        return entry.is_alive(self._clock.now())

    def keys(self) -> List[str]:
        """Get alive keys of this store's namespace.

        Returns:
            Logical keys, namespace prefix stripped
        """
        now = self._clock.now()
        return [
            self._namespace.strip(key)
            for key, entry in self._table
            if self._namespace.owns(key) and entry.is_alive(now)
        ]

    def list_keys(self, prefix: str) -> List[str]:
        """Scan alive storage keys starting with ``prefix``.

        Matches raw storage keys across all namespaces; nothing is
        stripped.

        Args:
            prefix: Storage key prefix ("" for everything)

        Returns:
            Storage keys
        """
        now = self._clock.now()
        return [
            key
            for key, entry in self._table
            if key.startswith(prefix) and entry.is_alive(now)
        ]

    def size(self) -> int:
        """Count alive entries in the table."""
        now = self._clock.now()
        return sum(1 for _, entry in self._table if entry.is_alive(now))

    def is_empty(self) -> bool:
        return self.size() == 0

    def purge_expired(self) -> int:
        """Drop every expired entry.

        Returns:
            Number of entries dropped
        """
        if not len(self._table):
            return 0

        now = self._clock.now()
        removed = self._table.retain(lambda _, entry: entry.is_alive(now))

        if removed:
            self._stats.expirations += removed
            logger.debug(f"Purged {removed} expired entries")
            self._auto_save()

        return removed

    def clear(self) -> int:
        """Drop every entry, in all namespaces.

        Returns:
            Number of entries dropped
        """
        count = self._table.clear()
        self._auto_save()
        return count

    def clear_prefix(self, prefix: str) -> int:
        """Drop every entry, alive or not, whose storage key starts with prefix.

        Args:
            prefix: Storage key prefix

        Returns:
            Number of entries dropped
        """
        removed = self._table.retain(lambda key, _: not key.startswith(prefix))
        if removed:
            self._auto_save()
        return removed

    def save(self) -> None:
        """Persist the table through the backend.

        Raises:
            StorageIOError: If the medium fails
            SerializationError: If the table cannot be encoded
        """
        self._backend.save(self._table.to_dict(), backup=self.config.backup)
        self._stats.saves += 1

    def reload(self) -> None:
        """Replace the table with the persisted one, dropping unsaved changes."""
        self._table.replace(self._backend.load())
        logger.debug(f"Reloaded {len(self._table)} entries from {self._backend.locator}")

    def to_data(self) -> str:
        """Serialize the table to a document string."""
        return encode_table(self._table.to_dict())

    def close(self) -> None:
        """Release the store, flushing it first when auto-save is on.

        The flush is best effort: there is no caller left to handle a
        failure, so it is logged and not raised. This is the only place
        the store drops an error.
        """
        if self._closed:
            return
        self._closed = True

        if not self.config.auto_save:
            return

        try:
            self.save()
        except Exception:
            logger.exception(f"Final save to {self._backend.locator} failed")

    def get_stats(self) -> StoreStats:
        return self._stats

    def reset_stats(self) -> None:
        self._stats.reset()

    def _insert(self, key: str, entry: Entry) -> None:
        self._table.insert(self._namespace.apply(key), entry)
        self._stats.sets += 1
        self._auto_save()

    def _auto_save(self) -> None:
        if self.config.auto_save:
            self.save()

    def __contains__(self, key: str) -> bool:
        return self.contains_key(key)

    def __len__(self) -> int:
        return self.size()

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys())

    def __getitem__(self, key: str) -> Any:
        value = self.get(key, _MISSING)
        if value is _MISSING:
            raise KeyError(key)
        return value

    def __setitem__(self, key: str, value: Any) -> None:
        self.set(key, value)

    def __delitem__(self, key: str) -> None:
        if not self.remove(key):
            raise KeyError(key)

    def __enter__(self) -> "KVStore":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return (
            f"KVStore(backend={self._backend!r}, namespace={self.namespace!r}, "
            f"entries={len(self._table)})"
        )


__all__ = ["KVStore", "StoreConfig", "StoreStats"]
