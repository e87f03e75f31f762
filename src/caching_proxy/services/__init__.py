"""Service layer for business logic.

Architecture:
    Handler -> Service -> Repository
    (HTTP)  -> (Pipeline) -> (Cache store, upstream)
"""

from .proxy_service import ProxyService

__all__ = [
    "ProxyService",
]
