#!/usr/bin/env python3
"""
pinghistory run script.

Resolves settings once, then serves the app with uvicorn:
- Schema initialization runs in the app lifespan, before the socket is bound
- Exits non-zero if the settings are invalid or startup fails
"""

from __future__ import annotations

import argparse
from dataclasses import replace
from typing import Optional, Sequence

import uvicorn

from pinghistory import __version__
from pinghistory.config import LOG_LEVELS, Settings, parse_port
from pinghistory.db.app import create_app
from pinghistory.errors import ConfigError
from pinghistory.logger import get_logger, set_level

logger = get_logger(__name__)


def serve(settings: Settings) -> int:
    """
    Run the HTTP server until it is stopped.

    Args:
        settings: Resolved settings.

    Returns:
        Exit code: 0 after a normal shutdown, 1 if startup failed.
    """
    config = uvicorn.Config(
        create_app(settings),
        host=settings.listen_host,
        port=settings.listen_port,
        lifespan="on",
        log_level=settings.log_level.lower(),
    )
    server = uvicorn.Server(config)
    try:
        server.run()
    except SystemExit as e:
        # uvicorn exits with its own status (3) when the lifespan fails
        if e.code not in (0, None):
            logger.error("Server did not start (uvicorn exit status %s); see the errors above.", e.code)
            return 1
        raise

    if not server.started:
        logger.error("Server did not start; see the errors above.")
        return 1
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Record request paths into MySQL")
    parser.add_argument("--version", action="version", version=f"pinghistory {__version__}")
    parser.add_argument("--host", type=str, help="Interface to bind (default: PING_HOST or 0.0.0.0)")
    parser.add_argument("--port", type=str, help="Port to bind (default: PING_PORT or 8080)")
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        help="Log level (default: LOG_LEVEL or INFO)",
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = build_parser().parse_args(argv)

    try:
        settings = Settings.from_env()
        port = parse_port("--port", args.port) if args.port is not None else None
    except ConfigError as e:
        logger.error("Invalid configuration: %s", e)
        raise SystemExit(1)

    overrides = {
        "listen_host": args.host,
        "listen_port": port,
        "log_level": args.log_level,
    }
    settings = replace(settings, **{k: v for k, v in overrides.items() if v is not None})

    set_level(settings.log_level)
    raise SystemExit(serve(settings))


if __name__ == "__main__":
    main()
