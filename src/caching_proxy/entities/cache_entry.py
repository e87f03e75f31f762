"""Cache entry domain entity."""

from dataclasses import dataclass

# Ordered (name, value) pairs; a name may repeat for multi-valued headers.
HeaderPairs = tuple[tuple[str, str], ...]


@dataclass(frozen=True)
class CacheEntryEntity:
    """Domain entity for a captured upstream response.

    Created once, when the full upstream body for a cache miss has been
    received, and never mutated afterwards.

    Attributes:
        body: The complete upstream response body, byte for byte
        headers: The upstream response headers
    """

    body: bytes
    headers: HeaderPairs = ()

    def header_values(self, name: str) -> list[str]:
        """Return every value stored for a header name (case-insensitive)."""
        name = name.lower()
        return [value for key, value in self.headers if key.lower() == name]
