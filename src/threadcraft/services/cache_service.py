"""Result cache service.

Derives a deterministic fingerprint from the request parameters and
delegates storage to a CacheStore.
"""

import hashlib
import json
from typing import Any

from threadcraft.protocols import CacheStore


def fingerprint(**params: Any) -> str:
    """Build a cache key from normalized request parameters.

    Parameter order does not matter; values must be JSON-serializable.

    Example:
        ```python
        fingerprint(url="https://example.com", tone="engaging")
        # '5f0c...'
        ```
    """
    canonical = json.dumps(params, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


class CacheService:
    """Memoizes generation results for a bounded time.

    This service depends on the CacheStore PROTOCOL, so the in-memory store
    can be replaced by a shared one without changing callers.
    """

    def __init__(self, repository: CacheStore) -> None:
        """Initialize the cache service.

        Args:
            repository: Cache storage backend (required).
        """
        self._repository = repository

    @classmethod
    def create(cls, repository: CacheStore) -> "CacheService":
        """Factory method to create CacheService."""
        return cls(repository=repository)

    def get(self, key: str) -> Any | None:
        """Return the cached result, or None on a miss."""
        return self._repository.get(key)

    def put(self, key: str, value: Any) -> None:
        """Store a successful result."""
        self._repository.put(key, value)

    def clear(self) -> int:
        """Clear all cache entries.

        Returns:
            Number of entries deleted
        """
        return self._repository.clear_all()

    def get_stats(self) -> dict:
        """Get cache statistics."""
        return self._repository.get_stats()

    @property
    def repository(self) -> CacheStore:
        """Get the underlying repository (for testing)."""
        return self._repository
