"""Adjacency rules: which pieces may follow a given exit state.

Each exit state has an ``allowed`` and a ``forbidden`` set of piece ids. The
legal set is ``allowed - forbidden``; when the two overlap, forbidden wins.
A track with no pieces yet may only start flat or at a station.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass

from ride_tools.track.pieces import FLAT_TURN_PIECES, STATION_PIECES, PieceType
from ride_tools.track.states import ExitState, classify

logger = logging.getLogger(__name__)

P = PieceType


@dataclass(frozen=True)
class AdjacencyRule:
    """Allowed and forbidden successors for one exit state.

    Attributes:
        allowed: Piece ids that may follow
        forbidden: Piece ids that may never follow, even if listed in allowed
    """

    allowed: frozenset[int]
    forbidden: frozenset[int] = frozenset()

    @property
    def legal(self) -> frozenset[int]:
        """Effective legal successors (``allowed - forbidden``)."""
        return self.allowed - self.forbidden


# A new track must begin flat or at a station
BOOTSTRAP_PIECES: frozenset[int] = frozenset({P.FLAT}) | STATION_PIECES

# Used when an exit state has no rule
FALLBACK_PIECES: frozenset[int] = frozenset({P.FLAT}) | FLAT_TURN_PIECES

_LEAVING_FLAT = (
    frozenset(
        {
            P.FLAT,
            P.FLAT_TO_UP_25,
            P.FLAT_TO_DOWN_25,
            P.FLAT_TO_LEFT_BANK,
            P.FLAT_TO_RIGHT_BANK,
            P.S_BEND_LEFT,
            P.S_BEND_RIGHT,
            P.LEFT_VERTICAL_LOOP,
            P.RIGHT_VERTICAL_LOOP,
        }
    )
    | FLAT_TURN_PIECES
    | STATION_PIECES
)

_LEAVING_LEFT_BANK = frozenset(
    {
        P.LEFT_BANK,
        P.LEFT_BANK_TO_FLAT,
        P.BANKED_LEFT_QUARTER_TURN_5_TILES,
        P.LEFT_BANKED_QUARTER_TURN_3_TILES,
        P.LEFT_BANK_TO_UP_25,
        P.LEFT_BANK_TO_DOWN_25,
    }
)

_LEAVING_RIGHT_BANK = frozenset(
    {
        P.RIGHT_BANK,
        P.RIGHT_BANK_TO_FLAT,
        P.BANKED_RIGHT_QUARTER_TURN_5_TILES,
        P.RIGHT_BANKED_QUARTER_TURN_3_TILES,
        P.RIGHT_BANK_TO_UP_25,
        P.RIGHT_BANK_TO_DOWN_25,
    }
)

_LOOPS_AND_BENDS = frozenset(
    {P.LEFT_VERTICAL_LOOP, P.RIGHT_VERTICAL_LOOP, P.S_BEND_LEFT, P.S_BEND_RIGHT}
)

ADJACENCY_RULES: dict[ExitState, AdjacencyRule] = {
    ExitState.STATION: AdjacencyRule(
        allowed=_LEAVING_FLAT,
        forbidden=_LOOPS_AND_BENDS,
    ),
    ExitState.FLAT: AdjacencyRule(allowed=_LEAVING_FLAT),
    ExitState.TURN: AdjacencyRule(
        allowed=_LEAVING_FLAT,
        forbidden=frozenset({P.LEFT_VERTICAL_LOOP, P.RIGHT_VERTICAL_LOOP}),
    ),
    ExitState.UP25: AdjacencyRule(
        allowed=frozenset(
            {
                P.UP_25,
                P.UP_25_TO_UP_60,
                P.UP_25_TO_FLAT,
                P.UP_25_TO_LEFT_BANK,
                P.UP_25_TO_RIGHT_BANK,
                P.LEFT_QUARTER_TURN_5_TILES_UP_25,
                P.RIGHT_QUARTER_TURN_5_TILES_UP_25,
                P.LEFT_QUARTER_TURN_3_TILES_UP_25,
                P.RIGHT_QUARTER_TURN_3_TILES_UP_25,
            }
        )
    ),
    ExitState.UP60: AdjacencyRule(allowed=frozenset({P.UP_60, P.UP_60_TO_UP_25})),
    ExitState.DOWN25: AdjacencyRule(
        allowed=frozenset(
            {
                P.DOWN_25,
                P.DOWN_25_TO_DOWN_60,
                P.DOWN_25_TO_FLAT,
                P.DOWN_25_TO_LEFT_BANK,
                P.DOWN_25_TO_RIGHT_BANK,
                P.LEFT_QUARTER_TURN_5_TILES_DOWN_25,
                P.RIGHT_QUARTER_TURN_5_TILES_DOWN_25,
                P.LEFT_QUARTER_TURN_3_TILES_DOWN_25,
                P.RIGHT_QUARTER_TURN_3_TILES_DOWN_25,
            }
        )
    ),
    ExitState.DOWN60: AdjacencyRule(allowed=frozenset({P.DOWN_60, P.DOWN_60_TO_DOWN_25})),
    ExitState.LEFT_BANK: AdjacencyRule(allowed=_LEAVING_LEFT_BANK),
    ExitState.RIGHT_BANK: AdjacencyRule(allowed=_LEAVING_RIGHT_BANK),
    # Straight out of a bank transition the train has to settle into the
    # bank before it can pitch up or down.
    ExitState.FLAT_TO_LEFT_BANK: AdjacencyRule(
        allowed=_LEAVING_LEFT_BANK,
        forbidden=frozenset({P.LEFT_BANK_TO_UP_25, P.LEFT_BANK_TO_DOWN_25}),
    ),
    ExitState.FLAT_TO_RIGHT_BANK: AdjacencyRule(
        allowed=_LEAVING_RIGHT_BANK,
        forbidden=frozenset({P.RIGHT_BANK_TO_UP_25, P.RIGHT_BANK_TO_DOWN_25}),
    ),
}


def legal_pieces_for_state(
    state: ExitState,
    rules: Mapping[ExitState, AdjacencyRule] | None = None,
) -> frozenset[int]:
    """
    Compute the legal successors of an exit state.

    Args:
        state: Exit state of the last placed piece
        rules: Rule table to consult (defaults to ADJACENCY_RULES)

    Returns:
        ``allowed - forbidden`` for the state, or FALLBACK_PIECES when the
        table has no rule for it.
    """
    table = ADJACENCY_RULES if rules is None else rules
    rule = table.get(state)
    if rule is None:
        logger.warning(f"No adjacency rule for state '{state.value}', using fallback set")
        return FALLBACK_PIECES
    return rule.legal


def legal_next_pieces(
    last_piece: int | None,
    is_station: bool = False,
    rules: Mapping[ExitState, AdjacencyRule] | None = None,
) -> tuple[ExitState | None, frozenset[int]]:
    """
    Determine which pieces may follow the last placed piece.

    Args:
        last_piece: Piece id of the last placement, or None for an empty track
        is_station: Station hint for the last placement
        rules: Rule table to consult (defaults to ADJACENCY_RULES)

    Returns:
        Tuple of (exit state or None for an empty track, legal piece ids)
    """
    if last_piece is None:
        return None, BOOTSTRAP_PIECES

    state = classify(last_piece, is_station)
    return state, legal_pieces_for_state(state, rules)
