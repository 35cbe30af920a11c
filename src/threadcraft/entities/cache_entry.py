"""Cache entry domain entity."""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class CacheEntryEntity:
    """Domain entity for a memoized generation result.

    Attributes:
        created_at: Clock reading when the entry was written
        value: The cached result payload
    """

    created_at: float
    value: Any

    def is_expired(self, now: float, ttl: float) -> bool:
        """Return True once the entry is older than the TTL."""
        return now - self.created_at >= ttl
