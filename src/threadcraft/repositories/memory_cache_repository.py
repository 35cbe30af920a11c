"""In-memory implementation of CacheStore.

Entries live in a process-local OrderedDict. The store is best-effort: it is
lost on restart and never shared between worker processes.
"""

import threading
import time
from collections import OrderedDict
from collections.abc import Callable
from typing import Any

from threadcraft.config import settings
from threadcraft.entities import CacheEntryEntity


class InMemoryCacheRepository:
    """TTL map with least-recently-used eviction.

    This class satisfies the CacheStore protocol through structural
    typing - no explicit inheritance needed.

    Expiry is only checked on read: a stale entry reads as a miss but stays
    in place until it is overwritten or evicted. When the store holds more
    than ``max_entries`` the least recently used entry is dropped.
    """

    def __init__(
        self,
        ttl: float | None = None,
        max_entries: int | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the repository.

        Args:
            ttl: Entry time-to-live in seconds. Defaults to settings.
            max_entries: Entry ceiling before LRU eviction. Defaults to settings.
            clock: Monotonic time source (injectable for tests).
        """
        self._ttl = ttl if ttl is not None else settings.cache_ttl
        self._max_entries = max_entries or settings.cache_max_entries
        self._clock = clock
        self._entries: OrderedDict[str, CacheEntryEntity] = OrderedDict()
        self._lock = threading.Lock()

    @classmethod
    def create(
        cls,
        ttl: float | None = None,
        max_entries: int | None = None,
    ) -> "InMemoryCacheRepository":
        """Factory method to create InMemoryCacheRepository with defaults.

        Args:
            ttl: Entry TTL in seconds. If None, uses settings.
            max_entries: Entry ceiling. If None, uses settings.

        Returns:
            Configured InMemoryCacheRepository
        """
        return cls(ttl=ttl, max_entries=max_entries)

    def get(self, key: str) -> Any | None:
        """Return the cached value, or None when absent or expired."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None or entry.is_expired(self._clock(), self._ttl):
                return None
            self._entries.move_to_end(key)
            return entry.value

    def put(self, key: str, value: Any) -> None:
        """Store value under key, evicting the oldest entry when full."""
        with self._lock:
            self._entries[key] = CacheEntryEntity(created_at=self._clock(), value=value)
            self._entries.move_to_end(key)
            while len(self._entries) > self._max_entries:
                self._entries.popitem(last=False)

    def clear_all(self) -> int:
        """Remove every entry and return how many there were."""
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
            return count

    def count_all(self) -> int:
        """Count stored entries, expired ones included."""
        return len(self._entries)

    def get_stats(self) -> dict:
        """Get repository statistics."""
        return {
            "total_entries": self.count_all(),
            "max_entries": self._max_entries,
            "ttl": self._ttl,
        }

    @property
    def ttl(self) -> float:
        """Get the configured time-to-live in seconds."""
        return self._ttl
