"""httpx implementation of UpstreamForwarder.

Sends one request per cache miss to the configured upstream target and
buffers the complete response before returning it.
"""

import logging
from collections.abc import AsyncIterator, Iterable

import httpx

from caching_proxy.entities import HeaderPairs, UpstreamResponseEntity, UpstreamTarget
from caching_proxy.errors import UpstreamStreamError, UpstreamUnavailableError

logger = logging.getLogger(__name__)

# Connection-level headers, never relayed in either direction
HOP_BY_HOP_HEADERS = frozenset(
    {
        "connection",
        "keep-alive",
        "proxy-connection",
        "te",
        "trailer",
        "transfer-encoding",
        "upgrade",
    }
)


def relay_headers(
    raw_headers: Iterable[tuple[bytes, bytes]],
    keep_content_length: bool = False,
    drop: Iterable[str] = (),
) -> HeaderPairs:
    """Convert upstream response headers to the pairs stored and relayed.

    Hop-by-hop headers are dropped. ``Content-Length`` is dropped too and
    recomputed from the buffered body when the response is written, unless
    ``keep_content_length`` is set (HEAD responses have no body to count).

    Args:
        raw_headers: Raw (name, value) pairs as received
        keep_content_length: Keep the upstream ``Content-Length``
        drop: Extra lowercase header names to leave out
    """
    skipped = HOP_BY_HOP_HEADERS | set(drop)
    if not keep_content_length:
        skipped = skipped | {"content-length"}

    pairs = []
    for raw_key, raw_value in raw_headers:
        key = raw_key.decode("latin-1")
        if key.lower() in skipped:
            continue
        pairs.append((key, raw_value.decode("latin-1")))
    return tuple(pairs)


async def _non_empty(body: AsyncIterator[bytes]) -> AsyncIterator[bytes]:
    async for chunk in body:
        if chunk:
            yield chunk


class HttpxUpstreamForwarder:
    """Forwarder using a shared ``httpx.AsyncClient``.

    This class satisfies the UpstreamForwarder protocol through structural
    typing - no explicit inheritance needed.

    The outbound request always goes to the target's own scheme, host and
    port. Its path is the target's base path followed by the inbound
    path+query. The response body is read raw, without content decoding,
    so cached bytes are identical to what upstream sent.

    Example:
        ```python
        forwarder = HttpxUpstreamForwarder.create("http://upstream.example:9000")
        response = await forwarder.forward("GET", "/items?id=7", [("Accept", "*/*")])
        print(response.status_code, response.body)
        await forwarder.aclose()
        ```
    """

    def __init__(
        self,
        target: UpstreamTarget,
        client: httpx.AsyncClient,
        timeout: float | None = None,
    ) -> None:
        """Initialize the forwarder.

        Args:
            target: The upstream server to forward to.
            client: HTTP client used for all outbound requests.
            timeout: Per-request timeout in seconds. None waits forever.
        """
        self._target = target
        self._client = client
        self._timeout = httpx.Timeout(timeout)

    @classmethod
    def create(
        cls,
        target_url: str,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "HttpxUpstreamForwarder":
        """Factory method to create a forwarder with its own client.

        Args:
            target_url: Upstream base URL, e.g. ``http://upstream.example:9000``.
            timeout: Per-request timeout in seconds. None waits forever.
            transport: Optional transport (tests pass ``httpx.MockTransport``).

        Returns:
            Configured HttpxUpstreamForwarder

        Raises:
            ValueError: If the target URL is invalid
        """
        target = UpstreamTarget.from_url(target_url)
        client = httpx.AsyncClient(
            transport=transport,
            timeout=httpx.Timeout(timeout),
            follow_redirects=False,
        )
        return cls(target=target, client=client, timeout=timeout)

    @property
    def target(self) -> UpstreamTarget:
        """The configured upstream target."""
        return self._target

    def url_for(self, target: str) -> str:
        """Outbound URL for an inbound path+query."""
        return self._target.url_for(target)

    def build_headers(self, headers: Iterable[tuple[str, str]]) -> list[tuple[str, str]]:
        """Copy inbound headers for the outbound request.

        ``Host`` is replaced by the target host and hop-by-hop headers are
        dropped; everything else passes through unchanged.
        """
        outbound = [("Host", self._target.host_header)]
        for key, value in headers:
            key_lower = key.lower()
            if key_lower == "host" or key_lower in HOP_BY_HOP_HEADERS:
                continue
            outbound.append((key, value))
        return outbound

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
        url = self.url_for(target)

        # Built directly so the client's default headers are not merged in
        request = httpx.Request(
            method=method,
            url=url,
            headers=self.build_headers(headers),
            content=_non_empty(body) if body is not None else None,
            extensions={"timeout": self._timeout.as_dict()},
        )

        try:
            response = await self._client.send(request, stream=True)
        except httpx.RequestError as e:
            raise UpstreamUnavailableError(f"Error forwarding request: {e}", url) from e

        keep_content_length = method.upper() == "HEAD"

        try:
            if response.is_stream_consumed:
                # Transport handed back a response it already read; the
                # loaded content is decoded, so its encoding header no longer applies
                body = response.content
                response_headers = relay_headers(
                    response.headers.raw,
                    keep_content_length=keep_content_length,
                    drop=("content-encoding",),
                )
            else:
                body = b"".join([chunk async for chunk in response.aiter_raw()])
                response_headers = relay_headers(response.headers.raw, keep_content_length=keep_content_length)
        except (httpx.HTTPError, httpx.StreamError) as e:
            raise UpstreamStreamError(f"Error in proxy response: {e}", url) from e
        finally:
            await response.aclose()

        logger.debug(f"Upstream response: {response.status_code} from {url}")

        return UpstreamResponseEntity(
            status_code=response.status_code,
            headers=response_headers,
            body=body,
        )

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()
