import logging
import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv
from uvicorn.config import LOG_LEVELS

load_dotenv()

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


def _env_timeout(name: str) -> float | None:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return None
    return float(value)


@dataclass(frozen=True)
class Settings:
    """Proxy settings loaded from environment variables.

    Command-line flags override these values, see ``caching_proxy.cli``.
    """

    # Listener
    host: str = os.getenv("PROXY_HOST", "0.0.0.0")
    port: int = int(os.getenv("PROXY_PORT", "3000"))

    # Upstream
    target: str | None = os.getenv("PROXY_TARGET") or None
    upstream_timeout: float | None = _env_timeout("UPSTREAM_TIMEOUT")  # None = wait forever

    # Cache
    clear_cache: bool = _env_flag("PROXY_CLEAR_CACHE")
    cache_status_header: str = os.getenv("CACHE_STATUS_HEADER", "X-Cache")

    # Logging
    log_level: str = os.getenv("LOG_LEVEL", "info")

    def __post_init__(self) -> None:
        """Validate settings after initialization."""
        if not 0 <= self.port <= 65535:
            raise ValueError(f"PROXY_PORT must be between 0 and 65535, got {self.port}")

        if self.upstream_timeout is not None and self.upstream_timeout <= 0:
            raise ValueError("UPSTREAM_TIMEOUT must be a positive number of seconds")

        if not self.cache_status_header.strip():
            raise ValueError("CACHE_STATUS_HEADER must not be empty")

        if self.log_level.lower() not in LOG_LEVELS:
            raise ValueError(f"LOG_LEVEL must be one of {sorted(LOG_LEVELS)}, got {self.log_level!r}")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def configure_logging(level: str = "info") -> None:
    """Configure root logging for the proxy process."""
    logging.basicConfig(level=LOG_LEVELS[level.lower()], format=LOG_FORMAT)
