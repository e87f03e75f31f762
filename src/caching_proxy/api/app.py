import httpx
from fastapi import FastAPI, Request, Response

from caching_proxy.api.dependencies import build_lifespan, get_handler
from caching_proxy.config import Settings, get_settings
from caching_proxy.protocols import CacheStore


async def proxy(request: Request) -> Response:
    """Serve from the cache or forward to upstream."""
    return await get_handler(request).handle(request)


def create_app(
    settings: Settings | None = None,
    cache_store: CacheStore | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Create the caching proxy app.

    Every path is proxied for every method, including extension methods
    such as PROPFIND or PURGE. The app exposes no routes of its own, so
    docs and openapi are disabled.

    Args:
        settings: Proxy settings. Defaults to environment settings.
        cache_store: Store to inject. A fresh in-memory store when None.
        transport: Optional httpx transport for the upstream client.

    Returns:
        Configured FastAPI application
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="Caching Proxy",
        description="HTTP caching reverse proxy for a single upstream server",
        version="0.1.0",
        lifespan=build_lifespan(settings, cache_store=cache_store, transport=transport),
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )

    # Plain route without a method list, so no method is answered with 405
    app.add_route("/{path:path}", proxy, include_in_schema=False)

    return app
