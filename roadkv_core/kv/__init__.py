"""KV module - Entries, expiry, namespaces and the entry table."""

from roadkv_core.kv.entry import Entry, is_expired
from roadkv_core.kv.clock import Clock, SystemClock, ManualClock
from roadkv_core.kv.namespace import Namespace
from roadkv_core.kv.table import EntryTable

__all__ = [
    "Entry",
    "is_expired",
    "Clock",
    "SystemClock",
    "ManualClock",
    "Namespace",
    "EntryTable",
]
