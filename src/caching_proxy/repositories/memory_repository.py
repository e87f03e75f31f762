"""In-memory implementation of CacheStore.

Entries live for the lifetime of the process. There is no expiry,
eviction or size bound.
"""

import logging
import threading

from caching_proxy.entities import CacheEntryEntity, CacheKey

logger = logging.getLogger(__name__)


class InMemoryCacheRepository:
    """Dict-backed cache store.

    This class satisfies the CacheStore protocol through structural
    typing - no explicit inheritance needed.

    Entries are frozen objects inserted in one assignment, so a reader
    sees either no entry or a complete one. The lock keeps the store
    consistent when the app runs under a threaded server.
    """

    def __init__(self) -> None:
        """Initialize an empty store."""
        self._entries: dict[str, CacheEntryEntity] = {}
        self._lock = threading.Lock()

    @classmethod
    def create(cls) -> "InMemoryCacheRepository":
        """Factory method to create an empty store."""
        return cls()

    def lookup(self, key: CacheKey) -> CacheEntryEntity | None:
        """Get the entry stored for a key, or None."""
        with self._lock:
            return self._entries.get(key.value)

    def insert(self, key: CacheKey, entry: CacheEntryEntity) -> None:
        """Store an entry, replacing any previous entry for the key."""
        with self._lock:
            self._entries[key.value] = entry
        logger.debug(f"Cache STORE: {key} ({len(entry.body)} bytes)")

    def clear(self) -> int:
        """Remove all entries.

        Returns:
            Number of entries removed
        """
        with self._lock:
            size_before = len(self._entries)
            self._entries.clear()
        logger.info(f"Cache cleared: {size_before} items removed")
        return size_before

    def count_all(self) -> int:
        """Count entries currently stored."""
        with self._lock:
            return len(self._entries)

    def __len__(self) -> int:
        return self.count_all()

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, CacheKey):
            return False
        with self._lock:
            return key.value in self._entries
