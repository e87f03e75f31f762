"""Cache storage protocol.

Defines the interface for any backend that maps cache keys to captured
upstream responses. The default implementation keeps everything in
process memory; nothing in the request pipeline depends on that.
"""

from typing import Protocol, runtime_checkable

from caching_proxy.entities import CacheEntryEntity, CacheKey


@runtime_checkable
class CacheStore(Protocol):
    """Protocol for cache storage backends.

    Any type that implements these methods satisfies the protocol, no
    explicit inheritance needed.

    Example:
        ```python
        from caching_proxy.protocols import CacheStore
        from caching_proxy.repositories import InMemoryCacheRepository

        store: CacheStore = InMemoryCacheRepository()
        ```
    """

    def lookup(self, key: CacheKey) -> CacheEntryEntity | None:
        """Get the entry stored for a key.

        Args:
            key: The cache key

        Returns:
            The stored entry, or None if the key is absent
        """
        ...

    def insert(self, key: CacheKey, entry: CacheEntryEntity) -> None:
        """Store an entry, replacing any entry already stored for the key.

        Args:
            key: The cache key
            entry: The complete captured response
        """
        ...

    def clear(self) -> int:
        """Remove all entries.

        Returns:
            Number of entries removed
        """
        ...

    def count_all(self) -> int:
        """Count entries currently stored.

        Returns:
            Total number of cached entries
        """
        ...
