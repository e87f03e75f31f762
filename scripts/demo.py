#!/usr/bin/env python3
"""
Demo script for the caching proxy.

Runs the proxy app in-process against a simulated upstream server and
shows cache misses, hits, key discrimination and failure handling.
"""

import time

import httpx
from fastapi.testclient import TestClient

from caching_proxy import InMemoryCacheRepository, Settings, create_app

TARGET = "http://upstream.example:9000"


class SimulatedUpstream:
    """Slow upstream that counts the requests it receives."""

    def __init__(self) -> None:
        self.calls = 0
        self.down = False

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls += 1
        if self.down:
            raise httpx.ConnectError("Connection refused")
        time.sleep(0.2)
        item_id = request.url.params.get("id", "0")
        return httpx.Response(
            200,
            headers={"Content-Type": "application/json"},
            stream=httpx.ByteStream(f'{{"id":{item_id}}}'.encode()),
        )


def print_section(title: str) -> None:
    """Print a section header."""
    print("\n" + "=" * 70)
    print(f"  {title}")
    print("=" * 70)


def timed_get(client: TestClient, path: str) -> None:
    """Request a path and print status, cache status and latency."""
    start = time.time()
    response = client.get(path)
    duration = (time.time() - start) * 1000
    cache_status = response.headers.get("x-cache", "-")
    print(f"  GET {path:<16} {response.status_code}  {cache_status:<5} {duration:7.2f}ms  {response.text}")


def main() -> None:
    """Run the demo."""
    print("\n🚀 Caching Proxy Demo")
    print(f"Simulated upstream: {TARGET}")

    upstream = SimulatedUpstream()
    store = InMemoryCacheRepository()
    app = create_app(Settings(target=TARGET), cache_store=store, transport=httpx.MockTransport(upstream))

    with TestClient(app) as client:
        print_section("Miss, then hit")
        timed_get(client, "/items?id=7")
        timed_get(client, "/items?id=7")

        print_section("Query string is part of the key")
        timed_get(client, "/items?id=8")
        timed_get(client, "/items?id=8")

        print_section("Upstream down")
        upstream.down = True
        timed_get(client, "/items?id=9")
        timed_get(client, "/items?id=7")

    print(f"\n📊 Upstream calls: {upstream.calls}, cached entries: {store.count_all()}")


if __name__ == "__main__":
    main()
