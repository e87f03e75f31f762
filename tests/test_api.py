"""
Tests for the caching proxy HTTP surface.
"""

import httpx
from fastapi.testclient import TestClient

from caching_proxy.api.app import create_app
from caching_proxy.config import Settings
from caching_proxy.entities import CacheEntryEntity, CacheKey


def test_end_to_end_miss_then_hit(client, upstream, cache_store):
    """First request is forwarded and stored, the second is served from cache."""
    upstream.respond("/items?id=7", 200, [("Content-Type", "application/json")], b'{"id":7}')

    first = client.get("/items?id=7")
    assert first.status_code == 200
    assert first.content == b'{"id":7}'
    assert first.headers["x-cache"] == "MISS"
    assert first.headers["content-type"] == "application/json"

    forwarded = upstream.requests[0]
    assert forwarded.method == "GET"
    assert forwarded.url.host == "upstream.example"
    assert forwarded.url.port == 9000
    assert forwarded.url.raw_path == b"/items?id=7"
    assert forwarded.headers["host"] == "upstream.example"

    assert CacheKey("/items?id=7") in cache_store

    second = client.get("/items?id=7")
    assert second.status_code == 200
    assert second.content == b'{"id":7}'
    assert second.headers["x-cache"] == "HIT"
    assert second.headers["content-type"] == "application/json"
    assert upstream.call_count == 1


def test_key_discrimination_by_query(client, upstream):
    """Requests differing only in query string are cached independently."""
    assert client.get("/items?id=1").headers["x-cache"] == "MISS"
    assert client.get("/items?id=2").headers["x-cache"] == "MISS"
    assert client.get("/items?id=1").headers["x-cache"] == "HIT"
    assert client.get("/items?id=2").headers["x-cache"] == "HIT"
    assert upstream.call_count == 2


def test_key_is_not_normalized(client, upstream):
    """Case, trailing slash and parameter order all produce distinct keys."""
    for path in ["/items", "/Items", "/items/", "/items?a=1&b=2", "/items?b=2&a=1"]:
        assert client.get(path).headers["x-cache"] == "MISS"
    assert upstream.call_count == 5


def test_key_ignores_method(client, upstream):
    """Method is not part of the key: a POST after a GET is a hit."""
    assert client.get("/shared").headers["x-cache"] == "MISS"
    response = client.post("/shared", content=b"payload")
    assert response.headers["x-cache"] == "HIT"
    assert upstream.call_count == 1


def test_connection_failure_returns_500_without_caching(client, upstream, cache_store):
    """Upstream connection errors give 500 and leave no cache entry."""
    upstream.fail_with = httpx.ConnectError("Connection refused")

    response = client.get("/down")
    assert response.status_code == 500
    assert response.text == "Internal Server Error"
    assert "x-cache" not in response.headers
    assert cache_store.count_all() == 0

    # No negative caching: the next request forwards again
    upstream.fail_with = None
    retry = client.get("/down")
    assert retry.status_code == 200
    assert retry.headers["x-cache"] == "MISS"
    assert upstream.call_count == 2


def test_repeated_failures_do_not_break_other_requests(client, upstream):
    """The server keeps serving healthy keys after upstream failures."""
    assert client.get("/healthy").headers["x-cache"] == "MISS"

    upstream.fail_with = httpx.ConnectError("Connection refused")
    for _ in range(3):
        assert client.get("/broken").status_code == 500

    hit = client.get("/healthy")
    assert hit.status_code == 200
    assert hit.headers["x-cache"] == "HIT"

    upstream.fail_with = None
    assert client.get("/other").status_code == 200


def test_upstream_status_is_relayed_on_miss(client, upstream):
    """A miss relays the upstream status code."""
    upstream.respond("/missing", 404, body=b"not found")

    response = client.get("/missing")
    assert response.status_code == 404
    assert response.content == b"not found"
    assert response.headers["x-cache"] == "MISS"


def test_hit_is_always_served_with_200(client, upstream):
    """Cached entries carry no status; hits are written as 200."""
    upstream.respond("/missing", 404, body=b"not found")

    client.get("/missing")
    hit = client.get("/missing")
    assert hit.status_code == 200
    assert hit.content == b"not found"
    assert hit.headers["x-cache"] == "HIT"


def test_request_body_and_headers_are_forwarded(client, upstream):
    """Method, body and client headers reach upstream unchanged."""
    response = client.put(
        "/upload?v=2",
        content=b"hello upstream",
        headers={"X-Custom": "yes", "Content-Type": "text/plain"},
    )
    assert response.status_code == 200

    forwarded = upstream.requests[0]
    assert forwarded.method == "PUT"
    assert forwarded.headers["x-custom"] == "yes"
    assert forwarded.headers["content-type"] == "text/plain"
    assert forwarded.headers["host"] == "upstream.example"
    assert upstream.bodies[0] == b"hello upstream"


def test_get_without_body_sends_no_body(client, upstream):
    """Requests without a body are forwarded without one."""
    client.get("/plain")
    assert upstream.bodies[0] == b""
    assert "transfer-encoding" not in upstream.requests[0].headers


def test_multi_valued_headers_survive_caching(client, upstream):
    """Repeated upstream headers are relayed on both miss and hit."""
    upstream.respond("/cookies", 200, [("Set-Cookie", "a=1"), ("Set-Cookie", "b=2")], b"ok")

    miss = client.get("/cookies")
    hit = client.get("/cookies")
    assert miss.headers.get_list("set-cookie") == ["a=1", "b=2"]
    assert hit.headers.get_list("set-cookie") == ["a=1", "b=2"]


def test_root_path_is_proxied(client, upstream):
    """The root path and doc-like paths belong to upstream, not the proxy."""
    assert client.get("/").headers["x-cache"] == "MISS"
    assert client.get("/docs").headers["x-cache"] == "MISS"
    assert [r.url.raw_path for r in upstream.requests] == [b"/", b"/docs"]


def test_target_base_path_is_prefixed(cache_store, upstream):
    """A target with a base path prefixes every forwarded path."""
    app = create_app(
        Settings(target="http://upstream.example:9000/api/"),
        cache_store=cache_store,
        transport=httpx.MockTransport(upstream),
    )
    with TestClient(app) as client:
        response = client.get("/items?id=7")

    assert response.status_code == 200
    assert upstream.requests[0].url.raw_path == b"/api/items?id=7"
    assert CacheKey("/items?id=7") in cache_store


def test_custom_cache_status_header(cache_store, upstream):
    """The cache-status header name is configurable."""
    app = create_app(
        Settings(target="http://upstream.example:9000", cache_status_header="X-Proxy-Cache"),
        cache_store=cache_store,
        transport=httpx.MockTransport(upstream),
    )
    with TestClient(app) as client:
        response = client.get("/x")

    assert response.headers["x-proxy-cache"] == "MISS"
    assert "x-cache" not in response.headers


def test_clear_cache_on_start_empties_injected_store(cache_store, upstream):
    """With clear_cache set, entries present at startup are removed."""
    cache_store.insert(CacheKey("/stale"), CacheEntryEntity(body=b"old"))

    app = create_app(
        Settings(target="http://upstream.example:9000", clear_cache=True),
        cache_store=cache_store,
        transport=httpx.MockTransport(upstream),
    )
    with TestClient(app) as client:
        response = client.get("/stale")

    assert response.headers["x-cache"] == "MISS"
    assert upstream.call_count == 1


def test_store_is_kept_without_clear_cache(cache_store, upstream):
    """Without clear_cache, an injected store is used as it is."""
    cache_store.insert(CacheKey("/warm"), CacheEntryEntity(body=b"warm", headers=(("X-Warm", "1"),)))

    app = create_app(
        Settings(target="http://upstream.example:9000"),
        cache_store=cache_store,
        transport=httpx.MockTransport(upstream),
    )
    with TestClient(app) as client:
        response = client.get("/warm")

    assert response.content == b"warm"
    assert response.headers["x-warm"] == "1"
    assert response.headers["x-cache"] == "HIT"
    assert upstream.call_count == 0


def test_extension_methods_are_forwarded(client, upstream):
    """Methods outside the common set still reach upstream unchanged."""
    for method in ["PROPFIND", "PURGE", "TRACE"]:
        response = client.request(method, f"/dav/{method.lower()}")
        assert response.status_code == 200
        assert response.headers["x-cache"] == "MISS"

    assert [r.method for r in upstream.requests] == ["PROPFIND", "PURGE", "TRACE"]


def test_dot_segments_are_rejected(client, upstream, cache_store):
    """Targets with dot segments get 400 and are neither forwarded nor cached."""
    response = client.get("/api/%2e%2e/secret")
    assert response.status_code == 400
    assert response.text == "Bad Request"
    assert upstream.call_count == 0
    assert cache_store.count_all() == 0


def test_broken_upstream_body_returns_500_without_caching(client, upstream, cache_store):
    """A failure while reading the upstream body gives 500 and stores nothing."""
    upstream.break_body("/flaky")

    response = client.get("/flaky")
    assert response.status_code == 500
    assert response.text == "Internal Server Error"
    assert "x-cache" not in response.headers
    assert cache_store.count_all() == 0

    upstream.respond("/flaky", 200, body=b"recovered")
    retry = client.get("/flaky")
    assert retry.status_code == 200
    assert retry.content == b"recovered"
    assert retry.headers["x-cache"] == "MISS"
    assert upstream.call_count == 2


def test_head_miss_keeps_upstream_content_length(client, upstream):
    """A HEAD miss relays the length upstream announced, not 0."""
    upstream.respond("/file", 200, [("Content-Length", "42"), ("Content-Type", "text/plain")])

    head = client.head("/file")
    assert head.status_code == 200
    assert head.headers["x-cache"] == "MISS"
    assert head.headers["content-length"] == "42"
    assert head.headers.get_list("content-length") == ["42"]

    # The cached entry has no body, so a GET hit announces what it sends
    get = client.get("/file")
    assert get.headers["x-cache"] == "HIT"
    assert get.headers["content-length"] == "0"
