"""Cache storage protocol.

Defines the interface for any key/value store that memoizes generation
results for a bounded time.
"""

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class CacheStore(Protocol):
    """Protocol for TTL-bounded result stores.

    Any type that implements these methods satisfies the protocol, no
    explicit inheritance needed.
    """

    def get(self, key: str) -> Any | None:
        """Return the value stored under key, or None on a miss or expiry.

        Args:
            key: The cache fingerprint

        Returns:
            The cached value, or None
        """
        ...

    def put(self, key: str, value: Any) -> None:
        """Store or overwrite the value under key.

        Args:
            key: The cache fingerprint
            value: The result payload
        """
        ...

    def clear_all(self) -> int:
        """Remove every entry.

        Returns:
            Number of entries removed
        """
        ...

    def count_all(self) -> int:
        """Count stored entries, expired ones included."""
        ...

    def get_stats(self) -> dict:
        """Get store statistics (implementation-specific)."""
        ...
