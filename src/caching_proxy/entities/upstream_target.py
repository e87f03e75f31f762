"""Upstream target parsed from the configured base URL."""

from dataclasses import dataclass
from urllib.parse import urlsplit

DEFAULT_PORTS = {"http": 80, "https": 443}


@dataclass(frozen=True)
class UpstreamTarget:
    """The single upstream server requests are forwarded to.

    Attributes:
        scheme: ``http`` or ``https``
        host: Host name or IP address, without port
        port: Port to connect to (scheme default when the URL has none)
        base_path: Path prefix from the URL, without trailing slash
    """

    scheme: str
    host: str
    port: int
    base_path: str = ""

    @classmethod
    def from_url(cls, url: str) -> "UpstreamTarget":
        """Parse a target base URL such as ``http://upstream.example:9000/api``.

        Raises:
            ValueError: If the URL is not an absolute http(s) URL with a host
        """
        parts = urlsplit(url.strip())
        scheme = parts.scheme.lower()
        if scheme not in DEFAULT_PORTS:
            raise ValueError(f"Target URL must use http or https, got: {url!r}")
        if not parts.hostname:
            raise ValueError(f"Target URL has no host: {url!r}")

        # .port raises ValueError for out-of-range values
        port = parts.port or DEFAULT_PORTS[scheme]

        return cls(
            scheme=scheme,
            host=parts.hostname,
            port=port,
            base_path=parts.path.rstrip("/"),
        )

    @property
    def host_header(self) -> str:
        """Value sent as the outbound ``Host`` header."""
        return f"[{self.host}]" if ":" in self.host else self.host

    @property
    def origin(self) -> str:
        """``scheme://host:port`` of the upstream server."""
        return f"{self.scheme}://{self.host_header}:{self.port}"

    def url_for(self, target: str) -> str:
        """Join the base path with an inbound path+query."""
        return f"{self.origin}{self.base_path}{target}"
