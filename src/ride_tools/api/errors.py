"""
Structured error responses for the protocol.

Maps the RideToolsError hierarchy to wire responses with an error type and
suggestions a caller can act on.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel

from ride_tools.exceptions import RideToolsError

# Error type constants for failures without a dedicated exception class
ERROR_INTERNAL_ERROR = "INTERNAL_ERROR"


class APIError(BaseModel):
    """Structured error response.

    Attributes:
        error_type: Machine-readable error type (e.g., "PLACEMENT_REJECTED")
        message: Human-readable error description
        suggestions: List of actionable suggestions for fixing the error
        context: Additional context (construct id, coordinates, action)

    Example::

        error = APIError(
            error_type="NOTHING_TO_UNDO",
            message="No pieces to undo for construct 3",
            context={"constructId": 3},
        )
    """

    error_type: str
    message: str
    suggestions: list[str] = []
    context: dict[str, Any] = {}

    @classmethod
    def from_exception(cls, exc: Exception) -> APIError:
        """Create APIError from a Python exception.

        Handles both RideToolsError instances (with full context)
        and generic exceptions.

        Args:
            exc: The exception to convert

        Returns:
            APIError with structured error information
        """
        if isinstance(exc, RideToolsError):
            return cls(
                error_type=exc.error_code,
                message=exc.message,
                suggestions=exc.suggestions,
                context=exc.context,
            )

        return cls(
            error_type=ERROR_INTERNAL_ERROR,
            message=f"Internal error: {exc}",
            suggestions=["Check the server log for details"],
            context={"exception": type(exc).__name__},
        )

    def to_response(self) -> dict[str, Any]:
        """Render as a failed protocol response."""
        response: dict[str, Any] = {
            "success": False,
            "error": self.message,
            "errorType": self.error_type,
        }
        if self.suggestions:
            response["suggestions"] = self.suggestions
        if self.context:
            response["context"] = self.context
        return response
