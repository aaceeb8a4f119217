"""RoadKV - Embedded Persistent Key-Value Store.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.

A small key-value store meant to live inside another program, with:
- One JSON document per store (file, in-process, or Redis)
- Optional per-key TTL with lazy eviction
- Key namespacing, several logical stores in one document
- Auto-save after every mutation
- Backup of the previous document before each save
- Atomic writes (temp file + rename)

Architecture:
    ┌─────────────────────────────────────────────────────────────────┐
    │                          RoadKV Store                           │
    ├─────────────────────────────────────────────────────────────────┤
    │  ┌─────────────┐  ┌─────────────┐  ┌─────────────┐             │
    │  │   KVStore   │  │  Namespace  │  │   Entry     │   KV        │
    │  │  get/set    │  │  prefixing  │  │  TTL/expiry │   LAYER     │
    │  └──────┬──────┘  └──────┬──────┘  └──────┬──────┘             │
    │         │                │                │                     │
    │  ┌──────┴────────────────┴────────────────┴──────┐             │
    │  │     EntryTable          Serializer (codec)     │   TABLE     │
    │  └──────────────────────┬────────────────────────┘             │
    │                         │                                       │
    │  ┌──────────────────────┴────────────────────────┐             │
    │  │              Storage Backends                  │             │
    │  │   ┌────────┐  ┌────────┐  ┌────────┐         │   STORAGE   │
    │  │   │ Memory │  │  File  │  │ Redis  │         │   LAYER     │
    │  │   └────────┘  └────────┘  └────────┘         │             │
    │  └──────────────────────────────────────────────┘             │
    └─────────────────────────────────────────────────────────────────┘

Example Usage:
    from roadkv_core import KVStore

    with KVStore.open("mydata.json", auto_save=True) as kv:
        kv.set("username", "hasan")
        kv.set_with_ttl("session_token", "abc123", 60)
        user = kv.get("username")

    # Two logical stores in one document
    app = KVStore.open("shared.json", namespace="app")
    admin = app.with_namespace("admin")
"""

__version__ = "1.0.0"
__author__ = "BlackRoad OS"

from roadkv_core.errors import (
    StoreError,
    StorageIOError,
    SerializationError,
    TimeError,
)
from roadkv_core.kv.entry import Entry, is_expired
from roadkv_core.kv.clock import Clock, SystemClock, ManualClock
from roadkv_core.kv.namespace import Namespace
from roadkv_core.kv.table import EntryTable
from roadkv_core.protocol.serializer import (
    Serializer,
    JSONSerializer,
    JSONStringSerializer,
    get_serializer,
)
from roadkv_core.protocol.format import encode_table, decode_table
from roadkv_core.store.backend import (
    StorageBackend,
    StorageConfig,
    StorageStats,
)
from roadkv_core.store.memory import MemoryBackend
from roadkv_core.store.file import FileBackend
from roadkv_core.store.redis import RedisBackend, RedisConfig
from roadkv_core.kvstore import KVStore, StoreConfig, StoreStats

__all__ = [
    # Store
    "KVStore",
    "StoreConfig",
    "StoreStats",
    # Errors
    "StoreError",
    "StorageIOError",
    "SerializationError",
    "TimeError",
    # KV
    "Entry",
    "is_expired",
    "Clock",
    "SystemClock",
    "ManualClock",
    "Namespace",
    "EntryTable",
    # Protocol
    "Serializer",
    "JSONSerializer",
    "JSONStringSerializer",
    "get_serializer",
    "encode_table",
    "decode_table",
    # Storage
    "StorageBackend",
    "StorageConfig",
    "StorageStats",
    "MemoryBackend",
    "FileBackend",
    "RedisBackend",
    "RedisConfig",
]
