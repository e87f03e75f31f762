"""Proxy result domain entity."""

from dataclasses import dataclass
from enum import Enum

from .cache_entry import HeaderPairs


class CacheStatus(str, Enum):
    """Whether a response was served from the cache store."""

    HIT = "HIT"
    MISS = "MISS"


@dataclass(frozen=True)
class ProxyResultEntity:
    """What the request pipeline decided to send back to the client.

    Attributes:
        status_code: Status code to write
        headers: Source headers (cached entry or upstream response)
        body: Response body
        cache_status: HIT when served from the store, MISS when forwarded
    """

    status_code: int
    headers: HeaderPairs
    body: bytes
    cache_status: CacheStatus
