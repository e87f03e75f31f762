"""Repository layer for data access.

This layer hides external dependencies (process memory, the upstream
HTTP server) behind protocol-based interfaces.
"""

from caching_proxy.protocols import CacheStore, UpstreamForwarder

from .httpx_forwarder import HOP_BY_HOP_HEADERS, HttpxUpstreamForwarder, relay_headers
from .memory_repository import InMemoryCacheRepository

__all__ = [
    "CacheStore",
    "UpstreamForwarder",
    "HOP_BY_HOP_HEADERS",
    "HttpxUpstreamForwarder",
    "InMemoryCacheRepository",
    "relay_headers",
]
