"""
Custom exception hierarchy for ride-tools.

Provides consistent error handling with context, suggestions, and actionable guidance.
All exceptions include:
- A machine-readable error code (``error_code``)
- Context information (construct id, coordinates, action name, etc.)
- Suggestions for how a caller can recover

Example::

    from ride_tools.exceptions import PlacementRejectedError

    raise PlacementRejectedError(
        "There's already something there",
        context={"constructId": 3, "x": 160, "y": 160, "z": 0},
        suggestions=["Query getValidNextPieces for the expected position"],
    )
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional


class RideToolsError(Exception):
    """
    Base exception for all ride-tools errors.

    Provides consistent formatting with context and suggestions.

    Attributes:
        error_code: Machine-readable error type used in protocol responses
        context: Dictionary of contextual information
        suggestions: List of actionable suggestions for fixing the error
    """

    error_code = "RIDE_TOOLS_ERROR"

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        suggestions: Optional[List[str]] = None,
    ):
        self.message = message
        self.context = context or {}
        self.suggestions = suggestions or []
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the error message with context and suggestions."""
        parts = [self.message]

        if self.context:
            parts.append("\n\nContext:")
            for key, value in self.context.items():
                parts.append(f"\n  {key}: {value}")

        if self.suggestions:
            parts.append("\n\nSuggestions:")
            for suggestion in self.suggestions:
                parts.append(f"\n  - {suggestion}")

        return "".join(parts)

    def __str__(self) -> str:
        return self._format_message()


class MalformedMessageError(RideToolsError):
    """
    A framed message could not be parsed as a JSON object.

    The connection stays open; the caller receives ``Invalid JSON``.
    """

    error_code = "MALFORMED_MESSAGE"

    def __init__(
        self,
        message: str = "Invalid JSON",
        context: Optional[Dict[str, Any]] = None,
        suggestions: Optional[List[str]] = None,
    ):
        super().__init__(
            message,
            context,
            suggestions or ["Send one JSON object per line, terminated by a newline"],
        )


class MissingEndpointError(RideToolsError):
    """The request has no usable ``endpoint`` field."""

    error_code = "MISSING_ENDPOINT"

    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__(
            "Request is missing the 'endpoint' field",
            context,
            ["Send requests shaped as {\"endpoint\": \"...\", \"params\": {...}}"],
        )


class UnknownEndpointError(RideToolsError):
    """The requested endpoint is not registered."""

    error_code = "UNKNOWN_ENDPOINT"

    def __init__(self, endpoint: str):
        self.endpoint = endpoint
        super().__init__(
            f"Unknown endpoint: {endpoint}",
            {"endpoint": endpoint},
            ["Call listEndpoints to see the supported endpoints"],
        )


class InvalidParametersError(RideToolsError):
    """
    A required parameter is missing or has the wrong type.

    Attributes:
        field: Name of the offending parameter as sent on the wire
        reason: Why the value was rejected
    """

    error_code = "INVALID_PARAMETERS"

    def __init__(self, field: str, reason: str, endpoint: Optional[str] = None):
        self.field = field
        self.reason = reason
        context: Dict[str, Any] = {"field": field}
        if endpoint:
            context["endpoint"] = endpoint
        super().__init__(f"Invalid parameter '{field}': {reason}", context)


class ConstructNotFoundError(RideToolsError):
    """No construct with the given id exists in the world."""

    error_code = "CONSTRUCT_NOT_FOUND"

    def __init__(self, construct_id: int):
        self.construct_id = construct_id
        super().__init__(
            f"Construct with ID {construct_id} not found.",
            {"constructId": construct_id},
            ["Call listAll to see existing constructs"],
        )


class ActionFailedError(RideToolsError):
    """
    An external world action reported an error.

    Attributes:
        action: Name of the action that failed
        reason: Error text returned by the action layer
    """

    error_code = "ACTION_FAILED"

    def __init__(
        self,
        action: str,
        reason: str,
        context: Optional[Dict[str, Any]] = None,
        suggestions: Optional[List[str]] = None,
    ):
        self.action = action
        self.reason = reason
        ctx = dict(context or {})
        ctx.setdefault("action", action)
        super().__init__(f"Action '{action}' failed: {reason}", ctx, suggestions)


class PlacementRejectedError(ActionFailedError):
    """
    The world refused a placement (track piece, entrance or exit).

    No session state is mutated when this is raised.
    """

    error_code = "PLACEMENT_REJECTED"


class ActionTimeoutError(RideToolsError):
    """An external action did not complete within the configured bound."""

    error_code = "ACTION_TIMEOUT"

    def __init__(self, action: str, timeout: float):
        self.action = action
        self.timeout = timeout
        super().__init__(
            f"Action '{action}' did not complete within {timeout:g}s",
            {"action": action, "timeout_seconds": timeout},
            [
                "Retry the request; the world may still apply the action",
                "Inspect the construct before retrying a placement",
            ],
        )


class ElementNotFoundError(RideToolsError):
    """
    A placement succeeded but the resulting element could not be located.

    Indicates the protocol layer and the world are out of sync.
    """

    error_code = "ELEMENT_NOT_FOUND"


class NoNextConnectionError(RideToolsError):
    """The world connectivity query did not yield a next position."""

    error_code = "NO_NEXT_CONNECTION"


class NoStationFoundError(RideToolsError):
    """The construct has no station piece to attach an entrance and exit to."""

    error_code = "NO_STATION_FOUND"

    def __init__(self, construct_id: int):
        self.construct_id = construct_id
        super().__init__(
            f"No station piece found for construct {construct_id}",
            {"constructId": construct_id},
            ["Place a station piece before placing the entrance and exit"],
        )


class NothingToUndoError(RideToolsError):
    """The construct's session has no placements to undo."""

    error_code = "NOTHING_TO_UNDO"

    def __init__(self, construct_id: int):
        self.construct_id = construct_id
        super().__init__(
            f"No pieces to undo for construct {construct_id}",
            {"constructId": construct_id},
        )


class ConfigurationError(RideToolsError):
    """
    Configuration or settings error.

    Raised when a config file is unreadable or holds invalid values.
    """

    error_code = "CONFIGURATION_ERROR"


__all__ = [
    "RideToolsError",
    "MalformedMessageError",
    "MissingEndpointError",
    "UnknownEndpointError",
    "InvalidParametersError",
    "ConstructNotFoundError",
    "ActionFailedError",
    "PlacementRejectedError",
    "ActionTimeoutError",
    "ElementNotFoundError",
    "NoNextConnectionError",
    "NoStationFoundError",
    "NothingToUndoError",
    "ConfigurationError",
]
