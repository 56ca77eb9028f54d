"""Track piece identifiers and the static piece catalog.

Piece identifiers follow the world's track element numbering. The catalog
records a human-readable description and a display group for each piece;
placement geometry lives with the world implementation.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum


class PieceType(IntEnum):
    """Known track piece identifiers."""

    FLAT = 0
    END_STATION = 1
    BEGIN_STATION = 2
    MIDDLE_STATION = 3
    UP_25 = 4
    UP_60 = 5
    FLAT_TO_UP_25 = 6
    UP_25_TO_UP_60 = 7
    UP_60_TO_UP_25 = 8
    UP_25_TO_FLAT = 9
    DOWN_25 = 10
    DOWN_60 = 11
    FLAT_TO_DOWN_25 = 12
    DOWN_25_TO_DOWN_60 = 13
    DOWN_60_TO_DOWN_25 = 14
    DOWN_25_TO_FLAT = 15
    LEFT_QUARTER_TURN_5_TILES = 16
    RIGHT_QUARTER_TURN_5_TILES = 17
    FLAT_TO_LEFT_BANK = 18
    FLAT_TO_RIGHT_BANK = 19
    LEFT_BANK_TO_FLAT = 20
    RIGHT_BANK_TO_FLAT = 21
    BANKED_LEFT_QUARTER_TURN_5_TILES = 22
    BANKED_RIGHT_QUARTER_TURN_5_TILES = 23
    LEFT_BANK_TO_UP_25 = 24
    RIGHT_BANK_TO_UP_25 = 25
    UP_25_TO_LEFT_BANK = 26
    UP_25_TO_RIGHT_BANK = 27
    LEFT_BANK_TO_DOWN_25 = 28
    RIGHT_BANK_TO_DOWN_25 = 29
    DOWN_25_TO_LEFT_BANK = 30
    DOWN_25_TO_RIGHT_BANK = 31
    LEFT_BANK = 32
    RIGHT_BANK = 33
    LEFT_QUARTER_TURN_5_TILES_UP_25 = 34
    RIGHT_QUARTER_TURN_5_TILES_UP_25 = 35
    LEFT_QUARTER_TURN_5_TILES_DOWN_25 = 36
    RIGHT_QUARTER_TURN_5_TILES_DOWN_25 = 37
    S_BEND_LEFT = 38
    S_BEND_RIGHT = 39
    LEFT_VERTICAL_LOOP = 40
    RIGHT_VERTICAL_LOOP = 41
    LEFT_QUARTER_TURN_3_TILES = 42
    RIGHT_QUARTER_TURN_3_TILES = 43
    LEFT_BANKED_QUARTER_TURN_3_TILES = 44
    RIGHT_BANKED_QUARTER_TURN_3_TILES = 45
    LEFT_QUARTER_TURN_3_TILES_UP_25 = 46
    RIGHT_QUARTER_TURN_3_TILES_UP_25 = 47
    LEFT_QUARTER_TURN_3_TILES_DOWN_25 = 48
    RIGHT_QUARTER_TURN_3_TILES_DOWN_25 = 49
    LEFT_QUARTER_TURN_1_TILE = 50
    RIGHT_QUARTER_TURN_1_TILE = 51


@dataclass(frozen=True)
class PieceInfo:
    """Catalog entry for a track piece.

    Attributes:
        description: Human-readable name
        group: Display group ("flat", "station", "slope", "turn", "bank", "element")
    """

    description: str
    group: str


P = PieceType

PIECE_CATALOG: dict[PieceType, PieceInfo] = {
    P.FLAT: PieceInfo("Flat", "flat"),
    P.END_STATION: PieceInfo("End station", "station"),
    P.BEGIN_STATION: PieceInfo("Begin station", "station"),
    P.MIDDLE_STATION: PieceInfo("Middle station", "station"),
    P.UP_25: PieceInfo("Gentle slope up", "slope"),
    P.UP_60: PieceInfo("Steep slope up", "slope"),
    P.FLAT_TO_UP_25: PieceInfo("Flat to gentle slope up", "slope"),
    P.UP_25_TO_UP_60: PieceInfo("Gentle to steep slope up", "slope"),
    P.UP_60_TO_UP_25: PieceInfo("Steep to gentle slope up", "slope"),
    P.UP_25_TO_FLAT: PieceInfo("Gentle slope up to flat", "slope"),
    P.DOWN_25: PieceInfo("Gentle slope down", "slope"),
    P.DOWN_60: PieceInfo("Steep slope down", "slope"),
    P.FLAT_TO_DOWN_25: PieceInfo("Flat to gentle slope down", "slope"),
    P.DOWN_25_TO_DOWN_60: PieceInfo("Gentle to steep slope down", "slope"),
    P.DOWN_60_TO_DOWN_25: PieceInfo("Steep to gentle slope down", "slope"),
    P.DOWN_25_TO_FLAT: PieceInfo("Gentle slope down to flat", "slope"),
    P.LEFT_QUARTER_TURN_5_TILES: PieceInfo("Large left turn", "turn"),
    P.RIGHT_QUARTER_TURN_5_TILES: PieceInfo("Large right turn", "turn"),
    P.FLAT_TO_LEFT_BANK: PieceInfo("Flat to left bank", "bank"),
    P.FLAT_TO_RIGHT_BANK: PieceInfo("Flat to right bank", "bank"),
    P.LEFT_BANK_TO_FLAT: PieceInfo("Left bank to flat", "bank"),
    P.RIGHT_BANK_TO_FLAT: PieceInfo("Right bank to flat", "bank"),
    P.BANKED_LEFT_QUARTER_TURN_5_TILES: PieceInfo("Large banked left turn", "bank"),
    P.BANKED_RIGHT_QUARTER_TURN_5_TILES: PieceInfo("Large banked right turn", "bank"),
    P.LEFT_BANK_TO_UP_25: PieceInfo("Left bank to gentle slope up", "bank"),
    P.RIGHT_BANK_TO_UP_25: PieceInfo("Right bank to gentle slope up", "bank"),
    P.UP_25_TO_LEFT_BANK: PieceInfo("Gentle slope up to left bank", "bank"),
    P.UP_25_TO_RIGHT_BANK: PieceInfo("Gentle slope up to right bank", "bank"),
    P.LEFT_BANK_TO_DOWN_25: PieceInfo("Left bank to gentle slope down", "bank"),
    P.RIGHT_BANK_TO_DOWN_25: PieceInfo("Right bank to gentle slope down", "bank"),
    P.DOWN_25_TO_LEFT_BANK: PieceInfo("Gentle slope down to left bank", "bank"),
    P.DOWN_25_TO_RIGHT_BANK: PieceInfo("Gentle slope down to right bank", "bank"),
    P.LEFT_BANK: PieceInfo("Left bank", "bank"),
    P.RIGHT_BANK: PieceInfo("Right bank", "bank"),
    P.LEFT_QUARTER_TURN_5_TILES_UP_25: PieceInfo("Large left turn, gentle up", "turn"),
    P.RIGHT_QUARTER_TURN_5_TILES_UP_25: PieceInfo("Large right turn, gentle up", "turn"),
    P.LEFT_QUARTER_TURN_5_TILES_DOWN_25: PieceInfo("Large left turn, gentle down", "turn"),
    P.RIGHT_QUARTER_TURN_5_TILES_DOWN_25: PieceInfo("Large right turn, gentle down", "turn"),
    P.S_BEND_LEFT: PieceInfo("S-bend left", "turn"),
    P.S_BEND_RIGHT: PieceInfo("S-bend right", "turn"),
    P.LEFT_VERTICAL_LOOP: PieceInfo("Left vertical loop", "element"),
    P.RIGHT_VERTICAL_LOOP: PieceInfo("Right vertical loop", "element"),
    P.LEFT_QUARTER_TURN_3_TILES: PieceInfo("Medium left turn", "turn"),
    P.RIGHT_QUARTER_TURN_3_TILES: PieceInfo("Medium right turn", "turn"),
    P.LEFT_BANKED_QUARTER_TURN_3_TILES: PieceInfo("Medium banked left turn", "bank"),
    P.RIGHT_BANKED_QUARTER_TURN_3_TILES: PieceInfo("Medium banked right turn", "bank"),
    P.LEFT_QUARTER_TURN_3_TILES_UP_25: PieceInfo("Medium left turn, gentle up", "turn"),
    P.RIGHT_QUARTER_TURN_3_TILES_UP_25: PieceInfo("Medium right turn, gentle up", "turn"),
    P.LEFT_QUARTER_TURN_3_TILES_DOWN_25: PieceInfo("Medium left turn, gentle down", "turn"),
    P.RIGHT_QUARTER_TURN_3_TILES_DOWN_25: PieceInfo("Medium right turn, gentle down", "turn"),
    P.LEFT_QUARTER_TURN_1_TILE: PieceInfo("Small left turn", "turn"),
    P.RIGHT_QUARTER_TURN_1_TILE: PieceInfo("Small right turn", "turn"),
}

STATION_PIECES: frozenset[int] = frozenset(
    {P.END_STATION, P.BEGIN_STATION, P.MIDDLE_STATION}
)

# Flat-entry, flat-exit turns
FLAT_TURN_PIECES: frozenset[int] = frozenset(
    {
        P.LEFT_QUARTER_TURN_5_TILES,
        P.RIGHT_QUARTER_TURN_5_TILES,
        P.LEFT_QUARTER_TURN_3_TILES,
        P.RIGHT_QUARTER_TURN_3_TILES,
        P.LEFT_QUARTER_TURN_1_TILE,
        P.RIGHT_QUARTER_TURN_1_TILE,
    }
)

# Bit OR'd into trackPlaceFlags when a chain lift is requested
CHAIN_LIFT_FLAG = 1 << 0


def is_station_piece(piece_type: int) -> bool:
    """Check whether a piece identifier is a station piece."""
    return piece_type in STATION_PIECES


def piece_name(piece_type: int) -> str:
    """Return the enum name for a piece id, or ``UNKNOWN_<id>``."""
    try:
        return PieceType(piece_type).name
    except ValueError:
        return f"UNKNOWN_{piece_type}"
