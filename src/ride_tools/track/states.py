"""Exit-state classification for placed track pieces.

Every piece leaves the track in one of a small number of states (level,
sloped, banked, turning, at a station). Transition pieces are classified by
the state they END in, so a flat-to-gentle-up piece leaves ``up25`` and a
steep-to-gentle-up piece also leaves ``up25``. Adjacency rules therefore only
reason about the angle and bank a piece exits at, never the full history.

Example:
    >>> from ride_tools.track.states import ExitState, classify
    >>> classify(6)
    <ExitState.UP25: 'up25'>
    >>> classify(0, is_station=True)
    <ExitState.STATION: 'station'>
"""

from __future__ import annotations

import logging
from enum import Enum

from ride_tools.track.pieces import PieceType, is_station_piece

logger = logging.getLogger(__name__)

# Logged when a piece id is missing from the classification table
UNKNOWN_ANOMALY = "UNKNOWN_ANOMALY"


class ExitState(str, Enum):
    """Slope/bank/curvature condition a piece leaves behind."""

    STATION = "station"
    FLAT = "flat"
    UP25 = "up25"
    UP60 = "up60"
    DOWN25 = "down25"
    DOWN60 = "down60"
    TURN = "turn"
    LEFT_BANK = "left_bank"
    RIGHT_BANK = "right_bank"
    FLAT_TO_LEFT_BANK = "flat_to_left_bank"
    FLAT_TO_RIGHT_BANK = "flat_to_right_bank"


P = PieceType

EXIT_STATES: dict[int, ExitState] = {
    P.FLAT: ExitState.FLAT,
    P.END_STATION: ExitState.STATION,
    P.BEGIN_STATION: ExitState.STATION,
    P.MIDDLE_STATION: ExitState.STATION,
    # Slopes
    P.UP_25: ExitState.UP25,
    P.UP_60: ExitState.UP60,
    P.FLAT_TO_UP_25: ExitState.UP25,
    P.UP_25_TO_UP_60: ExitState.UP60,
    P.UP_60_TO_UP_25: ExitState.UP25,
    P.UP_25_TO_FLAT: ExitState.FLAT,
    P.DOWN_25: ExitState.DOWN25,
    P.DOWN_60: ExitState.DOWN60,
    P.FLAT_TO_DOWN_25: ExitState.DOWN25,
    P.DOWN_25_TO_DOWN_60: ExitState.DOWN60,
    P.DOWN_60_TO_DOWN_25: ExitState.DOWN25,
    P.DOWN_25_TO_FLAT: ExitState.FLAT,
    # Flat turns
    P.LEFT_QUARTER_TURN_5_TILES: ExitState.TURN,
    P.RIGHT_QUARTER_TURN_5_TILES: ExitState.TURN,
    P.LEFT_QUARTER_TURN_3_TILES: ExitState.TURN,
    P.RIGHT_QUARTER_TURN_3_TILES: ExitState.TURN,
    P.LEFT_QUARTER_TURN_1_TILE: ExitState.TURN,
    P.RIGHT_QUARTER_TURN_1_TILE: ExitState.TURN,
    # Banking
    P.FLAT_TO_LEFT_BANK: ExitState.FLAT_TO_LEFT_BANK,
    P.FLAT_TO_RIGHT_BANK: ExitState.FLAT_TO_RIGHT_BANK,
    P.LEFT_BANK_TO_FLAT: ExitState.FLAT,
    P.RIGHT_BANK_TO_FLAT: ExitState.FLAT,
    P.BANKED_LEFT_QUARTER_TURN_5_TILES: ExitState.LEFT_BANK,
    P.BANKED_RIGHT_QUARTER_TURN_5_TILES: ExitState.RIGHT_BANK,
    P.LEFT_BANKED_QUARTER_TURN_3_TILES: ExitState.LEFT_BANK,
    P.RIGHT_BANKED_QUARTER_TURN_3_TILES: ExitState.RIGHT_BANK,
    P.LEFT_BANK_TO_UP_25: ExitState.UP25,
    P.RIGHT_BANK_TO_UP_25: ExitState.UP25,
    P.UP_25_TO_LEFT_BANK: ExitState.LEFT_BANK,
    P.UP_25_TO_RIGHT_BANK: ExitState.RIGHT_BANK,
    P.LEFT_BANK_TO_DOWN_25: ExitState.DOWN25,
    P.RIGHT_BANK_TO_DOWN_25: ExitState.DOWN25,
    P.DOWN_25_TO_LEFT_BANK: ExitState.LEFT_BANK,
    P.DOWN_25_TO_RIGHT_BANK: ExitState.RIGHT_BANK,
    P.LEFT_BANK: ExitState.LEFT_BANK,
    P.RIGHT_BANK: ExitState.RIGHT_BANK,
    # Sloped turns
    P.LEFT_QUARTER_TURN_5_TILES_UP_25: ExitState.UP25,
    P.RIGHT_QUARTER_TURN_5_TILES_UP_25: ExitState.UP25,
    P.LEFT_QUARTER_TURN_5_TILES_DOWN_25: ExitState.DOWN25,
    P.RIGHT_QUARTER_TURN_5_TILES_DOWN_25: ExitState.DOWN25,
    P.LEFT_QUARTER_TURN_3_TILES_UP_25: ExitState.UP25,
    P.RIGHT_QUARTER_TURN_3_TILES_UP_25: ExitState.UP25,
    P.LEFT_QUARTER_TURN_3_TILES_DOWN_25: ExitState.DOWN25,
    P.RIGHT_QUARTER_TURN_3_TILES_DOWN_25: ExitState.DOWN25,
    # Elements that leave the track level
    P.S_BEND_LEFT: ExitState.FLAT,
    P.S_BEND_RIGHT: ExitState.FLAT,
    P.LEFT_VERTICAL_LOOP: ExitState.FLAT,
    P.RIGHT_VERTICAL_LOOP: ExitState.FLAT,
}


def is_known_piece(piece_type: int) -> bool:
    """Check whether a piece id has an entry in the classification table."""
    return piece_type in EXIT_STATES


def classify(piece_type: int, is_station: bool = False) -> ExitState:
    """
    Map a placed piece to the exit state it leaves behind.

    Args:
        piece_type: Track piece identifier
        is_station: Hint that the piece is a station regardless of its id

    Returns:
        The piece's ExitState. Unknown identifiers classify as FLAT and the
        anomaly is logged; this never raises.
    """
    if is_station or is_station_piece(piece_type):
        return ExitState.STATION

    state = EXIT_STATES.get(piece_type)
    if state is None:
        logger.warning(
            f"{UNKNOWN_ANOMALY}: piece type {piece_type} has no exit state, treating as flat"
        )
        return ExitState.FLAT
    return state
