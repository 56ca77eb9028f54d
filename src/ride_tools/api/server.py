"""
TCP server for the remote-control protocol.

Accepts connections on a configurable port, frames each connection's byte
stream into newline-terminated JSON messages and writes one JSON response
line per message. Messages on a connection are handled strictly in order:
the next message is not dispatched before the previous response has been
written.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any

from ride_tools.api.context import ServerContext
from ride_tools.api.dispatcher import Dispatcher
from ride_tools.api.errors import APIError
from ride_tools.api.framing import FrameReader
from ride_tools.api.session_store import SessionStore
from ride_tools.config import Config
from ride_tools.world.base import World

logger = logging.getLogger(__name__)


class RideServer:
    """
    Newline-delimited JSON server over TCP.

    Example:
        >>> server = RideServer(Dispatcher(ServerContext(world=SandboxWorld())))
        >>> await server.start("127.0.0.1", 0)
        >>> server.port
        54321
        >>> await server.stop()
    """

    def __init__(self, dispatcher: Dispatcher, read_size: int = 4096) -> None:
        self.dispatcher = dispatcher
        self.read_size = read_size
        self._server: asyncio.AbstractServer | None = None

    @property
    def port(self) -> int | None:
        """Port actually bound, once started."""
        if self._server is None or not self._server.sockets:
            return None
        return self._server.sockets[0].getsockname()[1]

    async def start(self, host: str, port: int) -> None:
        """Bind and start accepting connections."""
        self._server = await asyncio.start_server(self._handle_connection, host, port)
        logger.info(f"Listening on {host}:{self.port}")

    async def serve_forever(self) -> None:
        if self._server is None:
            raise RuntimeError("Server not started")
        async with self._server:
            await self._server.serve_forever()

    async def stop(self) -> None:
        if self._server is None:
            return
        self._server.close()
        await self._server.wait_closed()
        self._server = None
        logger.info("Server stopped")

    async def _handle_connection(
        self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter
    ) -> None:
        peer = writer.get_extra_info("peername")
        logger.info(f"Connection opened: {peer}")
        frames = FrameReader()

        try:
            while True:
                chunk = await reader.read(self.read_size)
                if not chunk:
                    break
                for message in frames.feed(chunk):
                    try:
                        response = await self.dispatcher.handle_message(message)
                    except Exception as e:
                        logger.exception(f"Unhandled error on message from {peer}")
                        response = APIError.from_exception(e).to_response()
                    if response is None:
                        continue
                    await self._write(writer, response)
        except ConnectionError as e:
            logger.warning(f"Connection {peer} lost: {e}")
        finally:
            rest = frames.reset()
            if rest:
                logger.debug(f"Discarding {len(rest)} unterminated byte(s) from {peer}")
            writer.close()
            try:
                await writer.wait_closed()
            except ConnectionError as e:
                logger.debug(f"Error closing {peer}: {e}")
            logger.info(f"Connection closed: {peer}")

    async def _write(self, writer: asyncio.StreamWriter, response: dict[str, Any]) -> None:
        line = json.dumps(response, default=str) + "\n"
        writer.write(line.encode("utf-8"))
        await writer.drain()


def create_context(config: Config, world: World | None = None) -> ServerContext:
    """Build the shared handler context from configuration."""
    if world is None:
        from ride_tools.world.sandbox import SandboxWorld

        world = SandboxWorld(
            map_size=config.sandbox.map_size,
            latency=config.sandbox.latency_seconds,
        )
    return ServerContext(
        world=world,
        sessions=SessionStore(fixed_origin=config.track.origin()),
        action_timeout=config.actions.timeout_seconds,
    )


async def serve(config: Config, world: World | None = None) -> None:
    """Run the server until cancelled."""
    context = create_context(config, world)
    server = RideServer(Dispatcher(context), read_size=config.server.read_size)
    await server.start(config.server.host, config.server.port)
    await server.serve_forever()

