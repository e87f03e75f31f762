"""Domain entities for internal representation.

These are frozen dataclasses shared by services, repositories and
handlers. They carry no HTTP framework types.
"""

from .cache_entry import CacheEntryEntity, HeaderPairs
from .cache_key import CacheKey
from .proxy_result import CacheStatus, ProxyResultEntity
from .upstream_response import UpstreamResponseEntity
from .upstream_target import UpstreamTarget

__all__ = [
    "CacheEntryEntity",
    "CacheKey",
    "CacheStatus",
    "HeaderPairs",
    "ProxyResultEntity",
    "UpstreamResponseEntity",
    "UpstreamTarget",
]
