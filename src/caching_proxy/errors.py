"""Exceptions raised by the proxy layers.

Repositories translate transport errors into these types and the handler
layer maps them to HTTP status codes.
"""


class ProxyError(Exception):
    """Base class for all proxy errors."""


class UpstreamError(ProxyError):
    """The upstream server could not produce a complete response.

    Attributes:
        url: The outbound URL the request was sent to
    """

    def __init__(self, message: str, url: str) -> None:
        super().__init__(message)
        self.url = url


class UpstreamUnavailableError(UpstreamError):
    """Connection to upstream failed before any response arrived."""


class UpstreamStreamError(UpstreamError):
    """Reading the upstream response body failed after headers were received."""


class MalformedRequestError(ProxyError, ValueError):
    """The inbound request target can not be turned into a cache key."""
