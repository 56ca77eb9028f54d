"""Type definitions for protocol endpoints.

Provides dataclasses for endpoint results, organized by domain:

    from ride_tools.api.types.construct import RideStats
    from ride_tools.api.types.track import PlacePieceResult
"""

from __future__ import annotations

from .construct import ConstructSummary, RideStats
from .track import (
    DeleteAllResult,
    EntranceExitResult,
    PlacePieceResult,
    PortalPlacement,
    UndoResult,
    ValidNextPiecesResult,
)

__all__ = [
    "ConstructSummary",
    "DeleteAllResult",
    "EntranceExitResult",
    "PlacePieceResult",
    "PortalPlacement",
    "RideStats",
    "UndoResult",
    "ValidNextPiecesResult",
]
