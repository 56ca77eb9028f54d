"""Track construction result types.

Provides dataclasses for piece placement, legal-successor queries,
entrance/exit placement and undo.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from ride_tools.track.coords import TileCoords
from ride_tools.track.states import ExitState


@dataclass
class PlacePieceResult:
    """Result of placing one track piece.

    Attributes:
        next_position: Where the following piece must be placed
        is_circuit_complete: Whether the track now closes on its origin
        history_length: Number of pieces in the session after placement
        message: Human-readable status
        station_detected: Whether the placed piece is a station piece
    """

    next_position: TileCoords
    is_circuit_complete: bool
    history_length: int
    message: str
    station_detected: bool = False

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        result: dict = {
            "nextPosition": self.next_position.to_dict(),
            "isCircuitComplete": self.is_circuit_complete,
            "historyLength": self.history_length,
            "message": self.message,
        }
        if self.station_detected:
            result["stationDetected"] = True
        return result


@dataclass
class ValidNextPiecesResult:
    """Legal successors of a construct's last placed piece.

    Attributes:
        valid_pieces: Piece ids that may be placed next
        last_piece_type: Piece id of the last placement, or None
        state_category: Exit state of the last placement, or None when empty
        position: Where the next piece must be placed (None when empty)
        warning: Set when the last piece had to be classified by fallback
    """

    valid_pieces: list[int]
    last_piece_type: int | None
    state_category: ExitState | None
    position: TileCoords | None = None
    warning: str | None = None

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        result: dict = {
            "validPieces": self.valid_pieces,
            "lastPieceType": self.last_piece_type,
            "stateCategory": self.state_category.value if self.state_category else None,
        }
        if self.position is not None:
            result["position"] = self.position.to_dict()
        if self.warning:
            result["warning"] = self.warning
        return result


@dataclass(frozen=True)
class PortalPlacement:
    """Derived position of an entrance or exit.

    Attributes:
        x: Tile column
        y: Tile row
        direction: Facing, 0-3
    """

    x: int
    y: int
    direction: int

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y, "direction": self.direction}


@dataclass
class EntranceExitResult:
    """Result of placing a construct's entrance and exit.

    Attributes:
        entrance: Entrance placement, or None if that side failed
        exit: Exit placement, or None if that side failed
        warning: Names the failed side and why, on partial success
    """

    entrance: PortalPlacement | None
    exit: PortalPlacement | None
    warning: str | None = None

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        result: dict = {
            "entrance": self.entrance.to_dict() if self.entrance else None,
            "exit": self.exit.to_dict() if self.exit else None,
        }
        if self.warning:
            result["warning"] = self.warning
        return result


@dataclass
class UndoResult:
    """Result of removing the most recently placed piece.

    Attributes:
        remaining: Pieces left in the session
        next_position: Next placement point after undo, or None when empty
        is_circuit_complete: Completion after undo
        removed_piece_type: Piece id that was removed
    """

    remaining: int
    next_position: TileCoords | None
    is_circuit_complete: bool
    removed_piece_type: int

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "remaining": self.remaining,
            "nextPosition": self.next_position.to_dict() if self.next_position else None,
            "isCircuitComplete": self.is_circuit_complete,
            "removedPieceType": self.removed_piece_type,
        }


@dataclass
class DeleteAllResult:
    """Result of demolishing every construct.

    Attributes:
        message: Human-readable summary
        demolished: Ids demolished, in order
    """

    message: str
    demolished: list[int] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"message": self.message, "demolished": self.demolished}
