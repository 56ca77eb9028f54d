"""Track domain: piece catalog, exit states, adjacency rules, coordinates."""

from ride_tools.track.coords import TileCoords, WorldCoords
from ride_tools.track.pieces import PIECE_CATALOG, STATION_PIECES, PieceType, is_station_piece
from ride_tools.track.rules import (
    ADJACENCY_RULES,
    BOOTSTRAP_PIECES,
    FALLBACK_PIECES,
    AdjacencyRule,
    legal_next_pieces,
)
from ride_tools.track.states import ExitState, classify, is_known_piece

__all__ = [
    "ADJACENCY_RULES",
    "AdjacencyRule",
    "BOOTSTRAP_PIECES",
    "ExitState",
    "FALLBACK_PIECES",
    "PIECE_CATALOG",
    "PieceType",
    "STATION_PIECES",
    "TileCoords",
    "WorldCoords",
    "classify",
    "is_known_piece",
    "is_station_piece",
    "legal_next_pieces",
]
