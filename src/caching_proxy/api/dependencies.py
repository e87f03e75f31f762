"""Dependency injection configuration for the FastAPI app.

Uses FastAPI's app.state pattern for storing layer instances.

Pattern:
    - Layers built in the lifespan and stored in app.state
    - Dependency functions retrieve them from request.app.state
    - The cache store is created once per app, no module-level state
"""

import logging
from collections.abc import AsyncIterator, Callable
from contextlib import AbstractAsyncContextManager, asynccontextmanager

import httpx
from fastapi import FastAPI, Request

from caching_proxy.config import Settings
from caching_proxy.handlers import ProxyHandler
from caching_proxy.protocols import CacheStore
from caching_proxy.repositories import HttpxUpstreamForwarder, InMemoryCacheRepository
from caching_proxy.services import ProxyService

logger = logging.getLogger(__name__)


def get_handler(request: Request) -> ProxyHandler:
    """Dependency injection for ProxyHandler from app.state.

    Raises:
        RuntimeError: If handler is not initialized
    """
    handler = getattr(request.app.state, "proxy_handler", None)
    if handler is None:
        raise RuntimeError("ProxyHandler not initialized. Check lifespan setup.")
    return handler


def build_lifespan(
    settings: Settings,
    cache_store: CacheStore | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> Callable[[FastAPI], AbstractAsyncContextManager[None]]:
    """Create the lifespan context manager for an app.

    Args:
        settings: Proxy settings; ``settings.target`` must be set.
        cache_store: Store to use. A fresh in-memory store when None.
        transport: Optional httpx transport for the upstream client.

    Returns:
        Lifespan function to pass to ``FastAPI(lifespan=...)``
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Initialize all layers and store them in app.state.

        1. Repositories - cache store and upstream forwarder
        2. Service (pipeline) - app.state.proxy_service
        3. Handler (HTTP) - app.state.proxy_handler

        Cleanup:
            Closes the upstream client and removes the layers from app.state
        """
        if not settings.target:
            raise RuntimeError("No upstream target configured. Set --target or PROXY_TARGET.")

        forwarder = HttpxUpstreamForwarder.create(
            settings.target,
            timeout=settings.upstream_timeout,
            transport=transport,
        )
        store = cache_store if cache_store is not None else InMemoryCacheRepository.create()

        if settings.clear_cache:
            logger.info("Clearing all cached responses...")
            store.clear()
            logger.info("Cache cleared successfully.")

        proxy_service = ProxyService.create(cache_store=store, forwarder=forwarder)
        proxy_handler = ProxyHandler(
            proxy_service=proxy_service,
            cache_status_header=settings.cache_status_header,
        )

        app.state.cache_store = store
        app.state.forwarder = forwarder
        app.state.proxy_service = proxy_service
        app.state.proxy_handler = proxy_handler

        logger.info(f"Proxy ready: upstream {forwarder.target.origin}, {store.count_all()} cached entries")

        try:
            yield
        finally:
            await forwarder.aclose()
            del app.state.proxy_handler
            del app.state.proxy_service
            del app.state.forwarder
            del app.state.cache_store
            logger.info("Proxy shut down")

    return lifespan

