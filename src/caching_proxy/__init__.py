"""Caching Proxy - HTTP caching reverse proxy for a single upstream server.

Requests are served from an in-memory cache keyed by path+query. On a
miss the request is forwarded to the configured upstream, the complete
response is stored, and then relayed with an ``X-Cache: MISS`` header.

Layers:
    - protocols: Interface contracts (CacheStore, UpstreamForwarder)
    - repositories: In-memory store and httpx forwarder
    - services: Request pipeline
    - handlers: HTTP request/response conversion
    - entities: Domain models (internal)
    - api: FastAPI app factory and lifespan

Usage:
    ```python
    from caching_proxy import Settings, create_app

    app = create_app(Settings(target="http://upstream.example:9000"))
    ```

From the command line:
    ```
    caching-proxy --port 3000 --target http://upstream.example:9000
    ```
"""

from caching_proxy.api.app import create_app
from caching_proxy.config import Settings, get_settings
from caching_proxy.entities import CacheEntryEntity, CacheKey, CacheStatus, UpstreamTarget
from caching_proxy.errors import (
    MalformedRequestError,
    ProxyError,
    UpstreamError,
    UpstreamStreamError,
    UpstreamUnavailableError,
)
from caching_proxy.handlers import ProxyHandler
from caching_proxy.protocols import CacheStore, UpstreamForwarder
from caching_proxy.repositories import HttpxUpstreamForwarder, InMemoryCacheRepository
from caching_proxy.services import ProxyService

__all__ = [
    # Configuration
    "Settings",
    "get_settings",
    # App
    "create_app",
    # Protocols (interfaces)
    "CacheStore",
    "UpstreamForwarder",
    # Services (pipeline)
    "ProxyService",
    # Handlers (HTTP)
    "ProxyHandler",
    # Repositories
    "InMemoryCacheRepository",
    "HttpxUpstreamForwarder",
    # Entities
    "CacheEntryEntity",
    "CacheKey",
    "CacheStatus",
    "UpstreamTarget",
    # Errors
    "ProxyError",
    "UpstreamError",
    "UpstreamUnavailableError",
    "UpstreamStreamError",
    "MalformedRequestError",
]
