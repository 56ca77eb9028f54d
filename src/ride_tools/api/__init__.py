"""
Remote-control protocol server for ride-tools.

Accepts newline-delimited JSON requests over TCP and drives track
construction in a world: creating constructs, placing and undoing track
pieces, placing entrances and exits, and querying legal successors.

Usage:
    rtt serve                  # Serve on 127.0.0.1:8080
    rtt serve --port 9000      # Serve on another port

Example session (one JSON document per line):
    > {"endpoint": "create", "params": {"typeId": 52, "objectId": 1, ...}}
    < {"success": true, "payload": {"constructId": 0}}
    > {"endpoint": "placePiece", "params": {"x": 5, "y": 5, "z": 0, ...}}
    < {"success": true, "payload": {"nextPosition": {...}, ...}}

This module provides:
- Dispatcher: Message-to-response routing
- RideServer: asyncio TCP server
- ServerContext: World, sessions and action timeout shared by handlers
- APIError: Structured error responses
"""

from ride_tools.api.context import ServerContext
from ride_tools.api.dispatcher import Dispatcher
from ride_tools.api.errors import APIError
from ride_tools.api.server import RideServer, create_context, serve

__all__ = [
    "APIError",
    "Dispatcher",
    "RideServer",
    "ServerContext",
    "create_context",
    "serve",
]
