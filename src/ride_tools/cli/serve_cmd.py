"""
Serve CLI command.

Provides the `rtt serve` command for running the protocol server against the
in-memory sandbox world.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from ride_tools.config import Config
from ride_tools.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


def apply_overrides(config: Config, args: argparse.Namespace) -> Config:
    """Apply command-line flags on top of loaded configuration."""
    if args.host is not None:
        config.server.host = args.host
    if args.port is not None:
        config.server.port = args.port
    if args.timeout is not None:
        config.actions.timeout_seconds = args.timeout
    if args.latency is not None:
        config.sandbox.latency_seconds = args.latency
    return config


def log_level(config: Config, debug: bool = False) -> int:
    """Pick the server log level from --debug and the [defaults] section.

    --debug wins over everything; otherwise verbose means DEBUG and quiet
    means WARNING, with verbose taking precedence when both are set.
    """
    if debug or config.defaults.verbose:
        return logging.DEBUG
    if config.defaults.quiet:
        return logging.WARNING
    return logging.INFO


def run_serve(args: argparse.Namespace) -> int:
    """Run the serve command.

    Args:
        args: Parsed arguments from argparse.

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    try:
        config = apply_overrides(Config.load(), args)
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    logging.basicConfig(
        level=log_level(config, args.debug),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    from ride_tools.api.server import serve

    try:
        asyncio.run(serve(config))
        return 0
    except KeyboardInterrupt:
        print("\nServer stopped.", file=sys.stderr)
        return 130
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
