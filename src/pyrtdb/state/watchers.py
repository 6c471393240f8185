"""Watcher reference counts.

One entry per :class:`~pyrtdb.models.watch.WatchKey`. A count of zero means
no remote subscription exists for that key; entries are dropped rather than
kept at zero.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Protocol

from pyrtdb.models.watch import WatchKey


class WatcherStore(Protocol):
    def get_count(self, key: WatchKey) -> int: ...

    def increment(self, key: WatchKey) -> int: ...

    def decrement(self, key: WatchKey) -> int: ...

    def remove(self, key: WatchKey) -> None: ...


class InMemoryWatcherStore:
    """Process-local reference-count table."""

    def __init__(self) -> None:
        self._counts: dict[WatchKey, int] = {}

    def get_count(self, key: WatchKey) -> int:
        return self._counts.get(key, 0)

    def increment(self, key: WatchKey) -> int:
        count = self._counts.get(key, 0) + 1
        self._counts[key] = count
        return count

    def decrement(self, key: WatchKey) -> int:
        """Decrement without going below zero; the entry is dropped at zero."""
        count = self._counts.get(key, 0) - 1
        if count <= 0:
            self._counts.pop(key, None)
            return 0
        self._counts[key] = count
        return count

    def remove(self, key: WatchKey) -> None:
        self._counts.pop(key, None)

    def keys(self) -> Iterator[WatchKey]:
        return iter(list(self._counts))

    def __len__(self) -> int:
        return len(self._counts)

    def __contains__(self, key: object) -> bool:
        return key in self._counts
