"""Command-line entry point.

Parses the listener and upstream options, then serves the proxy app
with uvicorn. Environment variables (and a ``.env`` file) provide the
defaults, flags override them.
"""

import argparse
import dataclasses
import logging
from collections.abc import Sequence

import uvicorn

from caching_proxy.api.app import create_app
from caching_proxy.config import Settings, configure_logging, get_settings
from caching_proxy.entities import UpstreamTarget

logger = logging.getLogger(__name__)


def build_parser(defaults: Settings) -> argparse.ArgumentParser:
    """Build the argument parser, using settings as defaults."""
    parser = argparse.ArgumentParser(
        prog="caching-proxy",
        description="Caching proxy server that forwards requests to a single upstream server",
    )
    parser.add_argument(
        "-p",
        "--port",
        type=int,
        default=defaults.port,
        help="Port for the caching proxy server (default: %(default)s)",
    )
    parser.add_argument(
        "-t",
        "--target",
        default=defaults.target,
        help="Target server to forward requests to",
    )
    parser.add_argument(
        "-c",
        "--clearCache",
        "--clear-cache",
        dest="clear_cache",
        action="store_true",
        default=defaults.clear_cache,
        help="Clear all cached responses on start",
    )
    parser.add_argument(
        "--host",
        default=defaults.host,
        help="Address to bind to (default: %(default)s)",
    )
    parser.add_argument(
        "--log-level",
        default=defaults.log_level,
        help="Logging level (default: %(default)s)",
    )
    return parser


def parse_settings(argv: Sequence[str] | None = None, defaults: Settings | None = None) -> Settings:
    """Parse command-line flags on top of environment settings.

    Exits with status 2 (argparse error) when no target is configured or
    a value is invalid.
    """
    defaults = defaults or get_settings()
    parser = build_parser(defaults)
    args = parser.parse_args(argv)

    if not args.target:
        parser.error("the following arguments are required: -t/--target (or set PROXY_TARGET)")

    try:
        UpstreamTarget.from_url(args.target)
        return dataclasses.replace(
            defaults,
            host=args.host,
            port=args.port,
            target=args.target,
            clear_cache=args.clear_cache,
            log_level=args.log_level,
        )
    except ValueError as e:
        parser.error(str(e))


def main(argv: Sequence[str] | None = None) -> None:
    """Run the caching proxy server."""
    settings = parse_settings(argv)
    configure_logging(settings.log_level)

    app = create_app(settings)

    logger.info(f"Caching proxy server is running on http://localhost:{settings.port}")
    logger.info(f"Forwarding requests to {settings.target}")

    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
