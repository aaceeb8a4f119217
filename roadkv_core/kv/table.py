"""RoadKV Entry Table - In-Memory Storage Key to Entry Mapping.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

from typing import Callable, Dict, Iterator, List, Mapping, Optional, Tuple

from roadkv_core.kv.entry import Entry


class EntryTable:
    """Mapping from storage key to Entry.

    Keys are unique and kept in insertion order. The table knows nothing
    about namespaces or expiry; callers pass predicates for that.

    Example:
        table = EntryTable()
        table.insert("app:user", Entry(value="alice"))
        removed = table.retain(lambda key, entry: entry.is_alive(now))
    """

    def __init__(self, entries: Optional[Mapping[str, Entry]] = None):
        self._entries: Dict[str, Entry] = dict(entries or {})

    def insert(self, key: str, entry: Entry) -> None:
        """Store entry, replacing any existing one."""
        self._entries[key] = entry

    def get(self, key: str) -> Optional[Entry]:
        """Get entry by key."""
        return self._entries.get(key)

    def remove(self, key: str) -> bool:
        """Remove entry.

        Returns:
            True if the key was present
        """
        return self._entries.pop(key, None) is not None

    def retain(self, predicate: Callable[[str, Entry], bool]) -> int:
        """Keep only entries for which ``predicate(key, entry)`` is true.

        Args:
            predicate: Function(key, entry) -> keep?

        Returns:
            Number of entries dropped
        """
        before = len(self._entries)
        self._entries = {k: e for k, e in self._entries.items() if predicate(k, e)}
        return before - len(self._entries)

    def clear(self) -> int:
        """Drop all entries and return how many there were."""
        count = len(self._entries)
        self._entries.clear()
        return count

    def replace(self, entries: Mapping[str, Entry]) -> None:
        """Swap in a new set of entries wholesale."""
        self._entries = dict(entries)

    def items(self) -> List[Tuple[str, Entry]]:
        """Snapshot of (key, entry) pairs."""
        return list(self._entries.items())

    def to_dict(self) -> Dict[str, Entry]:
        return dict(self._entries)

    def __iter__(self) -> Iterator[Tuple[str, Entry]]:
        # each pass walks a snapshot so callers may mutate while iterating
        yield from self.items()

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"EntryTable(entries={len(self._entries)})"


__all__ = ["EntryTable"]
