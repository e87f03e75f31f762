"""Upstream response domain entity."""

from dataclasses import dataclass

from .cache_entry import CacheEntryEntity, HeaderPairs


@dataclass(frozen=True)
class UpstreamResponseEntity:
    """A fully buffered response received from the upstream server.

    Attributes:
        status_code: Upstream status code, None if upstream sent none
        headers: Response headers to relay to the client
        body: The complete response body
    """

    status_code: int | None
    headers: HeaderPairs
    body: bytes

    def to_cache_entry(self) -> CacheEntryEntity:
        """Capture body and headers together as one cache entry."""
        return CacheEntryEntity(body=self.body, headers=self.headers)
