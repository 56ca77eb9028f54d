"""
Command dispatcher for the remote-control protocol.

Turns one framed message into one response: parse the JSON request, look up
its endpoint in the registry, run the handler and wrap the outcome.

Request::

    {"endpoint": "placePiece", "params": {...}, "id": 7}

Responses::

    {"success": true, "payload": {...}, "id": 7}
    {"success": false, "error": "...", "errorType": "PLACEMENT_REJECTED", "id": 7}
"""

from __future__ import annotations

import json
import logging
from typing import Any

from ride_tools.api.context import ServerContext
from ride_tools.api.errors import APIError
from ride_tools.api.registry import get_endpoint
from ride_tools.exceptions import (
    InvalidParametersError,
    MalformedMessageError,
    MissingEndpointError,
    RideToolsError,
    UnknownEndpointError,
)

logger = logging.getLogger(__name__)


class Dispatcher:
    """
    Routes protocol messages to registered endpoint handlers.

    Every failure is caught here and converted into an error response, so a
    bad message never closes the connection it arrived on.

    Example:
        >>> dispatcher = Dispatcher(ServerContext(world=SandboxWorld()))
        >>> await dispatcher.handle_message('{"endpoint": "listAll"}')
        {'success': True, 'payload': []}
    """

    def __init__(self, context: ServerContext) -> None:
        self.context = context

    async def handle_message(self, message: str) -> dict[str, Any] | None:
        """
        Handle one framed message.

        Args:
            message: One line of the stream, without its newline

        Returns:
            The response object, or None for a blank line
        """
        if not message.strip():
            return None

        try:
            request = json.loads(message)
        except (ValueError, RecursionError) as e:
            # JSONDecodeError, oversized integers and over-deep nesting
            logger.warning(f"Malformed message: {type(e).__name__}: {e}")
            return APIError.from_exception(MalformedMessageError()).to_response()

        if not isinstance(request, dict):
            return APIError.from_exception(
                MalformedMessageError(context={"received": type(request).__name__})
            ).to_response()

        response = await self.handle_request(request)
        if "id" in request:
            response["id"] = request["id"]
        return response

    async def handle_request(self, request: dict[str, Any]) -> dict[str, Any]:
        """
        Handle one parsed request object.

        Returns:
            ``{"success": true, "payload": ...}`` or an error response
        """
        endpoint = request.get("endpoint")
        try:
            if not isinstance(endpoint, str) or not endpoint:
                raise MissingEndpointError({"received": endpoint} if endpoint is not None else None)

            params = request.get("params")
            if params is None:
                params = {}
            elif not isinstance(params, dict):
                raise InvalidParametersError("params", "must be an object", endpoint)

            spec = get_endpoint(endpoint)
            if spec is None:
                raise UnknownEndpointError(endpoint)

            logger.debug(f"Dispatching {endpoint} with {params}")
            payload = await spec.handler(self.context, params)

        except RideToolsError as e:
            logger.info(f"{endpoint}: {e.error_code}: {e.message}")
            return APIError.from_exception(e).to_response()
        except Exception as e:
            logger.exception(f"Error handling request: {endpoint}")
            return APIError.from_exception(e).to_response()

        response: dict[str, Any] = {"success": True}
        if payload is not None:
            response["payload"] = payload
        return response
