"""Handler layer for HTTP endpoints.

Architecture:
    Handler -> Service -> Repository
    (HTTP)  -> (Pipeline) -> (Cache store, upstream)
"""

from .proxy_handler import ProxyHandler

__all__ = [
    "ProxyHandler",
]
