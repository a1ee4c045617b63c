"""Bounded LRU map and the per-directory listing cache built on it.

``ListingCache`` keeps one snapshot per directory and trusts it only while the
directory's ``st_mtime_ns`` (and the listing options) match what was captured.
Rebuilds run outside the map lock; whichever store completes last wins.
"""

from __future__ import annotations

import logging
import os
import threading
from collections import OrderedDict
from collections.abc import Callable, Hashable
from dataclasses import dataclass
from typing import Generic, TypeVar

from .identity import IdentityResolver
from .snapshot import build_listing_snapshot, safe_directory_mtime_ns
from .types import ListingOptions, ListingSnapshot

logger = logging.getLogger(__name__)

DEFAULT_MAX_CACHED_DIRECTORIES = 10

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")

_CACHE_MISS = object()


class LRUCache(Generic[K, V]):
    """Thread-safe ordered map evicting least-recently-used keys past ``capacity``."""

    def __init__(self, capacity: int) -> None:
        if capacity <= 0:
            raise ValueError("capacity must be >= 1")
        self.capacity = capacity
        self.evictions = 0
        self._items: OrderedDict[K, V] = OrderedDict()
        self._lock = threading.RLock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._items

    def keys(self) -> list[K]:
        """Return keys from least to most recently used."""
        with self._lock:
            return list(self._items.keys())

    def get(self, key: K, default: V | None = None) -> V | None:
        with self._lock:
            value = self._items.get(key, _CACHE_MISS)
            if value is _CACHE_MISS:
                return default
            self._items.move_to_end(key)
            return value

    def peek(self, key: K, default: V | None = None) -> V | None:
        """Return the value for ``key`` without refreshing its recency."""
        with self._lock:
            return self._items.get(key, default)

    def put(self, key: K, value: V) -> list[K]:
        """Store ``value`` and return the keys evicted to stay within capacity."""
        evicted: list[K] = []
        with self._lock:
            self._items[key] = value
            self._items.move_to_end(key)
            while len(self._items) > self.capacity:
                old_key, _ = self._items.popitem(last=False)
                evicted.append(old_key)
                self.evictions += 1
        return evicted

    def pop(self, key: K, default: V | None = None) -> V | None:
        with self._lock:
            return self._items.pop(key, default)

    def clear(self) -> None:
        with self._lock:
            self._items.clear()


@dataclass(frozen=True)
class CacheEntry:
    """Cached snapshot plus the directory mtime it was validated against."""

    snapshot: ListingSnapshot
    directory_mtime: int


SnapshotBuilder = Callable[[str, ListingOptions, IdentityResolver | None], ListingSnapshot]


class ListingCache:
    """Directory path to snapshot cache with mtime validation."""

    def __init__(
        self,
        options: ListingOptions | None = None,
        *,
        max_directories: int = DEFAULT_MAX_CACHED_DIRECTORIES,
        identity: IdentityResolver | None = None,
        builder: SnapshotBuilder = build_listing_snapshot,
    ) -> None:
        self.options = options or ListingOptions()
        self.identity = identity
        self._builder = builder
        self._entries: LRUCache[str, CacheEntry] = LRUCache(max_directories)

    @staticmethod
    def cache_key(directory: str | os.PathLike[str]) -> str:
        return os.path.abspath(os.fspath(directory))

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, directory: object) -> bool:
        if not isinstance(directory, (str, os.PathLike)):
            return False
        return self.cache_key(directory) in self._entries

    @property
    def directories(self) -> list[str]:
        return self._entries.keys()

    @property
    def evictions(self) -> int:
        return self._entries.evictions

    def lookup(self, directory: str | os.PathLike[str]) -> ListingSnapshot | None:
        """Return the cached snapshot if it is still fresh, without rebuilding."""
        key = self.cache_key(directory)
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.snapshot.options != self.options:
            return None
        if safe_directory_mtime_ns(key) != entry.directory_mtime:
            return None
        return entry.snapshot

    def get(self, directory: str | os.PathLike[str]) -> ListingSnapshot:
        """Return a fresh snapshot for ``directory``, rebuilding on mtime change."""
        key = self.cache_key(directory)
        cached = self.lookup(key)
        if cached is not None:
            return cached

        snapshot = self._builder(key, self.options, self.identity)
        self.store(snapshot)
        return snapshot

    def store(self, snapshot: ListingSnapshot) -> None:
        """Install ``snapshot``; snapshots without a captured mtime are not cached."""
        key = self.cache_key(snapshot.directory)
        if snapshot.captured_at is None:
            self._entries.pop(key)
            return
        evicted = self._entries.put(key, CacheEntry(snapshot=snapshot, directory_mtime=snapshot.captured_at))
        for old_key in evicted:
            logger.debug("evicted cached listing for %s", old_key)

    def invalidate(self, directory: str | os.PathLike[str]) -> None:
        self._entries.pop(self.cache_key(directory))

    def clear(self) -> None:
        self._entries.clear()

    def set_options(self, options: ListingOptions) -> None:
        """Switch listing options; entries built with other options go stale."""
        self.options = options


__all__ = [
    "DEFAULT_MAX_CACHED_DIRECTORIES",
    "LRUCache",
    "CacheEntry",
    "ListingCache",
]
