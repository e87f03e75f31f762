"""
Shared fixtures: a fake upstream server behind httpx.MockTransport.
"""

from collections.abc import Callable

import httpx
import pytest
from fastapi.testclient import TestClient

from caching_proxy.api.app import create_app
from caching_proxy.config import Settings
from caching_proxy.repositories import InMemoryCacheRepository

TARGET = "http://upstream.example:9000"


class BrokenStream(httpx.AsyncByteStream):
    """Response body that fails after the first chunk."""

    async def __aiter__(self):
        yield b"partial"
        raise httpx.ReadError("Connection reset by peer")


class FakeUpstream:
    """Records forwarded requests and answers with a configurable handler."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.bodies: list[bytes] = []
        self.fail_with: Exception | None = None
        # path+query -> factory, so every forward gets a fresh, unread response
        self.responses: dict[str, Callable[[], httpx.Response]] = {}

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.bodies.append(await request.aread())
        self.requests.append(request)
        if self.fail_with is not None:
            raise self.fail_with

        target = request.url.raw_path.decode("ascii")
        if target in self.responses:
            return self.responses[target]()
        return httpx.Response(
            200,
            headers=[("Content-Type", "application/json"), ("X-Upstream-Path", target)],
            stream=httpx.ByteStream(f'{{"path":"{target}"}}'.encode()),
        )

    def respond(self, target: str, status_code: int = 200, headers=(), body: bytes = b"") -> None:
        """Answer a path+query with a response whose body is still unread."""
        self.responses[target] = lambda: httpx.Response(
            status_code,
            headers=list(headers),
            stream=httpx.ByteStream(body),
        )

    def break_body(self, target: str) -> None:
        """Answer a path+query with headers, then fail while sending the body."""
        self.responses[target] = lambda: httpx.Response(
            200,
            headers=[("Content-Type", "text/plain")],
            stream=BrokenStream(),
        )

    @property
    def call_count(self) -> int:
        return len(self.requests)


@pytest.fixture
def upstream():
    """Fake upstream server."""
    return FakeUpstream()


@pytest.fixture
def broken_stream():
    """Upstream body that fails after the first chunk."""
    return BrokenStream()


@pytest.fixture
def cache_store():
    """Empty in-memory cache store."""
    return InMemoryCacheRepository()


@pytest.fixture
def settings():
    """Settings pointing at the fake upstream."""
    return Settings(target=TARGET)


@pytest.fixture
def client(settings, cache_store, upstream):
    """Test client for a proxy app wired to the fake upstream."""
    app = create_app(settings, cache_store=cache_store, transport=httpx.MockTransport(upstream))
    with TestClient(app) as test_client:
        yield test_client
