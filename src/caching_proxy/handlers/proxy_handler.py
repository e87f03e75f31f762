"""HTTP handler for proxied requests.

The handler converts between the ASGI request/response and service
calls. It owns HTTP concerns: status codes, header encoding and error
responses.
"""

import logging

from fastapi import Request, Response
from fastapi.responses import PlainTextResponse

from caching_proxy.entities import CacheKey, ProxyResultEntity
from caching_proxy.errors import MalformedRequestError, UpstreamError
from caching_proxy.services import ProxyService

logger = logging.getLogger(__name__)

ERROR_BODY = "Internal Server Error"
BAD_REQUEST_BODY = "Bad Request"


def request_headers(request: Request) -> list[tuple[str, str]]:
    """Inbound headers as (name, value) pairs, repeated names kept."""
    return [(key.decode("latin-1"), value.decode("latin-1")) for key, value in request.headers.raw]


def has_body(request: Request) -> bool:
    """Whether the client announced a request body."""
    return "content-length" in request.headers or "transfer-encoding" in request.headers


class ProxyHandler:
    """HTTP handler for every proxied path.

    This handler delegates the pipeline to ProxyService and handles
    HTTP-specific concerns like:
    - Deriving the cache key from the raw request target
    - Writing source headers plus the cache-status header
    - Turning failures into 400/500 responses

    Example:
        ```python
        handler = ProxyHandler(proxy_service=service)

        async def proxy(request: Request) -> Response:
            return await handler.handle(request)

        app.add_route("/{path:path}", proxy)
        ```
    """

    def __init__(self, proxy_service: ProxyService, cache_status_header: str = "X-Cache") -> None:
        """Initialize the proxy handler.

        Args:
            proxy_service: The request pipeline (required).
            cache_status_header: Name of the header carrying HIT/MISS.
        """
        self._proxy = proxy_service
        self._cache_status_header = cache_status_header

    async def handle(self, request: Request) -> Response:
        """Handle any proxied request.

        Args:
            request: The inbound request

        Returns:
            The cached or upstream response, 400 for an unusable request
            target, or 500 when upstream failed
        """
        raw_path = request.scope.get("raw_path") or request.scope["path"].encode("utf-8")
        # Some servers leave the query string in raw_path
        raw_path = raw_path.split(b"?", 1)[0]

        try:
            key = CacheKey.from_asgi(raw_path, request.scope.get("query_string", b""))
        except MalformedRequestError as e:
            logger.warning(f"Rejecting malformed request: {e}")
            return PlainTextResponse(BAD_REQUEST_BODY, status_code=400)

        try:
            result = await self._proxy.handle(
                key=key,
                method=request.method,
                headers=request_headers(request),
                body=request.stream() if has_body(request) else None,
            )
        except UpstreamError as e:
            logger.error(f"{e} ({e.url})")
            return PlainTextResponse(ERROR_BODY, status_code=500)

        return self.build_response(result, method=request.method)

    def build_response(self, result: ProxyResultEntity, method: str = "GET") -> Response:
        """Write status, source headers, cache-status header and body.

        ``Content-Length`` is computed from the body, except for a bodiless
        HEAD response, which keeps the length upstream announced.
        """
        response = Response(content=result.body, status_code=result.status_code)
        status_header = self._cache_status_header.lower()

        source_length = [value for key, value in result.headers if key.lower() == "content-length"]
        if method.upper() == "HEAD" and not result.body and source_length:
            response.raw_headers = [(k, v) for k, v in response.raw_headers if k != b"content-length"]
            response.raw_headers.append((b"content-length", source_length[0].encode("latin-1")))

        for key, value in result.headers:
            key_lower = key.lower()
            if key_lower in ("content-length", status_header):
                continue
            response.raw_headers.append((key_lower.encode("latin-1"), value.encode("latin-1")))

        response.raw_headers.append(
            (status_header.encode("latin-1"), result.cache_status.value.encode("latin-1"))
        )
        return response
