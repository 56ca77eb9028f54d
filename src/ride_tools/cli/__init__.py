"""
Command-line interface for ride-tools.

Provides CLI commands via the `ride-tools` or `rtt` command:

    ride-tools serve                   - Run the protocol server
    ride-tools pieces                  - List the track piece catalog
    ride-tools next <pieceType>        - Show legal successors of a piece
    ride-tools config                  - View and manage configuration

Examples:
    rtt serve --port 8080 --timeout 5
    rtt serve --latency 0.05 --debug
    rtt pieces --format json
    rtt next 6
    rtt next 1 --station
    rtt config --show
"""

import argparse
import sys
from typing import List, Optional

from ride_tools import __version__

__all__ = ["main"]


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for ride-tools CLI."""
    parser = argparse.ArgumentParser(
        prog="ride-tools",
        description="Track construction remote-control server and tools",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--version", action="version", version=f"ride-tools {__version__}")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Serve subcommand
    serve_parser = subparsers.add_parser("serve", help="Run the protocol server")
    serve_parser.add_argument("--host", help="Bind address (default: from config)")
    serve_parser.add_argument("--port", type=int, help="TCP port (default: from config)")
    serve_parser.add_argument(
        "--timeout", type=float, help="Seconds to wait for each world action"
    )
    serve_parser.add_argument(
        "--latency", type=float, help="Simulated sandbox latency per action, in seconds"
    )
    serve_parser.add_argument("--debug", action="store_true", help="Enable debug logging")

    # Pieces subcommand
    pieces_parser = subparsers.add_parser("pieces", help="List the track piece catalog")
    pieces_parser.add_argument("--format", choices=["table", "json"], default="table")
    pieces_parser.add_argument("--group", help="Only show pieces in this group")

    # Next subcommand
    next_parser = subparsers.add_parser("next", help="Show legal successors of a piece")
    next_parser.add_argument("piece_type", type=int, help="Piece id of the last placed piece")
    next_parser.add_argument(
        "--station", action="store_true", help="Treat the piece as a station piece"
    )
    next_parser.add_argument("--format", choices=["table", "json"], default="table")

    # Config subcommand
    config_parser = subparsers.add_parser("config", help="View and manage configuration")
    config_parser.add_argument("--show", action="store_true", help="Show effective config")
    config_parser.add_argument("--init", action="store_true", help="Create template config")
    config_parser.add_argument("--paths", action="store_true", help="Show config file paths")
    config_parser.add_argument("--user", action="store_true", help="Use user config for --init")

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    if args.command == "serve":
        from ride_tools.cli.serve_cmd import run_serve

        return run_serve(args)

    elif args.command == "pieces":
        from ride_tools.cli.pieces_cmd import run_pieces

        return run_pieces(args.format, args.group)

    elif args.command == "next":
        from ride_tools.cli.pieces_cmd import run_next

        return run_next(args.piece_type, args.station, args.format)

    elif args.command == "config":
        from ride_tools.cli.config_cmd import main as config_main

        sub_argv = []
        if args.show:
            sub_argv.append("--show")
        if args.init:
            sub_argv.append("--init")
        if args.paths:
            sub_argv.append("--paths")
        if args.user:
            sub_argv.append("--user")
        return config_main(sub_argv)

    return 1


if __name__ == "__main__":
    sys.exit(main())
