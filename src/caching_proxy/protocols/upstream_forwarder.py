"""Upstream forwarder protocol."""

from collections.abc import AsyncIterator, Iterable
from typing import Protocol, runtime_checkable

from caching_proxy.entities import UpstreamResponseEntity


@runtime_checkable
class UpstreamForwarder(Protocol):
    """Protocol for sending one request to the configured upstream server."""

    async def forward(
        self,
        method: str,
        target: str,
        headers: Iterable[tuple[str, str]],
        body: AsyncIterator[bytes] | None = None,
    ) -> UpstreamResponseEntity:
        """Forward a request and buffer the complete response.

        Args:
            method: HTTP method, passed through unchanged
            target: Inbound path+query
            headers: Inbound request headers as (name, value) pairs
            body: Inbound body stream, None when the request has no body

        Returns:
            The fully received upstream response

        Raises:
            UpstreamUnavailableError: If no response could be obtained
            UpstreamStreamError: If reading the response body failed
        """
        ...

    def url_for(self, target: str) -> str:
        """Outbound URL used for an inbound path+query."""
        ...
