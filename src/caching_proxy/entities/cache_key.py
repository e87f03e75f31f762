"""Cache key derived from the inbound request target."""

from dataclasses import dataclass
from urllib.parse import unquote, urlsplit

from caching_proxy.errors import MalformedRequestError


@dataclass(frozen=True)
class CacheKey:
    """The path-plus-query of an inbound request.

    No normalization is applied: case, trailing slashes and query
    parameter order all produce distinct keys. Method and body are not
    part of the key.
    """

    value: str

    @classmethod
    def from_target(cls, target: str) -> "CacheKey":
        """Build a key from an HTTP request target.

        Origin-form targets (``/items?id=7``) are used as they are.
        Absolute-form targets (``http://host/items?id=7``) are reduced to
        their path and query. Paths with ``.`` or ``..`` segments are
        rejected, since they could not be forwarded as they are.

        Raises:
            MalformedRequestError: If the target has no usable path
        """
        if not target:
            raise MalformedRequestError("Empty request target")

        if any(ch.isspace() or ord(ch) < 0x21 or ord(ch) > 0x7E for ch in target):
            raise MalformedRequestError(f"Invalid characters in request target: {target!r}")

        if "://" in target and not target.startswith("/"):
            try:
                parts = urlsplit(target)
            except ValueError as e:
                raise MalformedRequestError(f"Unparsable request target: {target!r}") from e
            if parts.scheme not in ("http", "https") or not parts.netloc:
                raise MalformedRequestError(f"Unsupported request target: {target!r}")
            target = parts.path or "/"
            if parts.query:
                target = f"{target}?{parts.query}"

        if not target.startswith("/"):
            raise MalformedRequestError(f"Request target must start with '/': {target!r}")

        # Dot segments would be collapsed by the outbound URL parser
        path = target.split("?", 1)[0]
        if any(unquote(segment) in (".", "..") for segment in path.split("/")):
            raise MalformedRequestError(f"Dot segments are not allowed in request target: {target!r}")

        return cls(value=target)

    @classmethod
    def from_asgi(cls, raw_path: bytes, query_string: bytes = b"") -> "CacheKey":
        """Build a key from the raw ASGI ``raw_path`` and ``query_string``."""
        try:
            target = raw_path.decode("ascii")
            query = query_string.decode("ascii")
        except UnicodeDecodeError as e:
            raise MalformedRequestError("Request target is not ASCII") from e

        if query:
            target = f"{target}?{query}"
        return cls.from_target(target)

    def __str__(self) -> str:
        return self.value
