"""Protocol interfaces for swappable implementations.

Protocols use structural typing, so tests and alternative backends only
need to provide the same methods.
"""

from .cache_store import CacheStore
from .upstream_forwarder import UpstreamForwarder

__all__ = [
    "CacheStore",
    "UpstreamForwarder",
]
