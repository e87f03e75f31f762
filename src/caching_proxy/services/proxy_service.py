"""Proxy service for the request pipeline.

This service orchestrates one request: it looks the key up in the cache
store, and on a miss forwards to upstream and stores the full response.
"""

import logging
from collections.abc import AsyncIterator, Iterable

from caching_proxy.entities import CacheKey, CacheStatus, ProxyResultEntity
from caching_proxy.protocols import CacheStore, UpstreamForwarder

logger = logging.getLogger(__name__)

# Upstream responses without a status are relayed as 500
DEFAULT_STATUS_CODE = 500


class ProxyService:
    """Core request pipeline.

    This service depends on PROTOCOLS, not concrete implementations:
    - CacheStore: in-memory by default
    - UpstreamForwarder: httpx by default, any fake in tests

    Pipeline:
        Received -> Lookup -> Hit -> Serving
                           -> Miss -> Forwarding -> Storing -> Serving
                                                 -> Failed

    Example:
        ```python
        from caching_proxy.repositories import HttpxUpstreamForwarder, InMemoryCacheRepository
        from caching_proxy.services import ProxyService

        service = ProxyService.create(
            cache_store=InMemoryCacheRepository.create(),
            forwarder=HttpxUpstreamForwarder.create("http://upstream.example:9000"),
        )
        result = await service.handle(CacheKey.from_target("/items?id=7"), "GET", [])
        ```
    """

    def __init__(self, cache_store: CacheStore, forwarder: UpstreamForwarder) -> None:
        """Initialize the proxy service.

        Args:
            cache_store: Cache storage backend (required).
            forwarder: Upstream forwarder (required).
        """
        self._store = cache_store
        self._forwarder = forwarder

    @classmethod
    def create(cls, cache_store: CacheStore, forwarder: UpstreamForwarder) -> "ProxyService":
        """Factory method to create ProxyService.

        Args:
            cache_store: Cache storage backend (required).
            forwarder: Upstream forwarder (required).

        Returns:
            Configured ProxyService instance
        """
        return cls(cache_store=cache_store, forwarder=forwarder)

    @property
    def cache_store(self) -> CacheStore:
        """The cache store used by this service."""
        return self._store

    async def handle(
        self,
        key: CacheKey,
        method: str,
        headers: Iterable[tuple[str, str]],
        body: AsyncIterator[bytes] | None = None,
    ) -> ProxyResultEntity:
        """Serve a request from the cache, or forward it and cache the response.

        Business logic:
        1. Look the key up in the cache store
        2. Hit: return the stored body and headers with status 200
        3. Miss: forward to upstream, store body and headers, return the
           upstream response

        Args:
            key: Cache key of the inbound request
            method: HTTP method
            headers: Inbound request headers
            body: Inbound body stream, None when the request has no body

        Returns:
            ProxyResultEntity with the response to write

        Raises:
            UpstreamUnavailableError: If upstream could not be reached
            UpstreamStreamError: If the upstream body could not be read
        """
        cached = self._store.lookup(key)
        if cached is not None:
            logger.info(f"Cache hit for {key}")
            return ProxyResultEntity(
                status_code=200,
                headers=cached.headers,
                body=cached.body,
                cache_status=CacheStatus.HIT,
            )

        logger.info(f"Cache miss for {key}. Forwarding request to {self._forwarder.url_for(key.value)}")

        # Upstream errors propagate before anything is stored
        response = await self._forwarder.forward(method, key.value, headers, body)

        self._store.insert(key, response.to_cache_entry())

        return ProxyResultEntity(
            status_code=response.status_code or DEFAULT_STATUS_CODE,
            headers=response.headers,
            body=response.body,
            cache_status=CacheStatus.MISS,
        )
