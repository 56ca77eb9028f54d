"""Track placement, legal-successor queries and undo.

Placement Lifecycle:
    1. placePiece converts the caller's tile coordinates to world space and
       asks the world to place the piece.
    2. The placed element is located on its tile (or a neighbouring tile,
       for multi-tile pieces) so its connectivity can be queried.
    3. The element's next connection point, converted back to tiles, is
       recorded with the placement and compared against the circuit origin.
    4. deleteLastPiece removes the newest piece through its recorded
       locator and pops it from the session.

All mutations of one construct run under that construct's session lock.

Example:
    >>> result = await place_piece(ctx, PlacePieceParams(
    ...     x=5, y=5, z=0, direction=0, constructId=0, pieceType=0))
    >>> result.next_position
    TileCoords(x=6, y=5, z=0, direction=0)
"""

from __future__ import annotations

import logging

from ride_tools.api.context import ServerContext
from ride_tools.api.params import PlacePieceParams
from ride_tools.api.session_store import ElementLocator, PlacementRecord, Session
from ride_tools.api.types import PlacePieceResult, UndoResult, ValidNextPiecesResult
from ride_tools.exceptions import (
    ElementNotFoundError,
    NoNextConnectionError,
    NothingToUndoError,
    PlacementRejectedError,
)
from ride_tools.track.coords import TILE_SIZE, TileCoords, WorldCoords
from ride_tools.track.pieces import CHAIN_LIFT_FLAG, is_station_piece, piece_name
from ride_tools.track.rules import legal_next_pieces
from ride_tools.track.states import UNKNOWN_ANOMALY, is_known_piece
from ride_tools.world.base import (
    ACTION_PLACE_PIECE,
    ACTION_REMOVE_PIECE,
    ELEMENT_TRACK,
    TileElement,
    World,
)

logger = logging.getLogger(__name__)

# Height tolerance, in height units, when matching the placed element
PRIMARY_TOLERANCE = 1
NEIGHBOUR_TOLERANCE = 2

NEIGHBOUR_OFFSETS: tuple[tuple[int, int], ...] = (
    (-1, -1),
    (0, -1),
    (1, -1),
    (-1, 0),
    (1, 0),
    (-1, 1),
    (0, 1),
    (1, 1),
)


def _matching_index(
    elements: list[TileElement],
    construct_id: int,
    expected_height: int,
    tolerance: int,
    piece_type: int,
) -> int | None:
    """Index of the best matching track element on a tile, or None."""
    candidates = [
        i
        for i, element in enumerate(elements)
        if element.type == ELEMENT_TRACK
        and element.construct_id == construct_id
        and abs(element.base_height - expected_height) <= tolerance
    ]
    if not candidates:
        return None
    for i in candidates:
        if elements[i].piece_type == piece_type:
            return i
    return candidates[0]


def locate_placed_element(
    world: World, construct_id: int, position: TileCoords, piece_type: int
) -> ElementLocator:
    """
    Find the world element created by a placement.

    Searches the target tile first, then its eight neighbours, since
    multi-tile pieces may anchor their element on an adjacent tile.

    Args:
        world: The world to search
        construct_id: Owner of the placed piece
        position: Placement position in tile space
        piece_type: Piece id that was placed, preferred on ties

    Returns:
        Locator of the matching element

    Raises:
        ElementNotFoundError: If no element matches anywhere in the search set
    """
    search = [((0, 0), PRIMARY_TOLERANCE)] + [
        (offset, NEIGHBOUR_TOLERANCE) for offset in NEIGHBOUR_OFFSETS
    ]
    for (dx, dy), tolerance in search:
        tile = world.get_tile(position.x + dx, position.y + dy)
        if tile is None:
            continue
        index = _matching_index(tile.elements, construct_id, position.z, tolerance, piece_type)
        if index is not None:
            element = tile.elements[index]
            return ElementLocator(
                tile_x=tile.x,
                tile_y=tile.y,
                element_index=index,
                position=WorldCoords(
                    x=tile.x * TILE_SIZE,
                    y=tile.y * TILE_SIZE,
                    z=TileCoords(tile.x, tile.y, element.base_height).to_world().z,
                    direction=element.direction,
                ),
                sequence=element.sequence,
            )

    raise ElementNotFoundError(
        "Placed track element not found near the placement position",
        {"constructId": construct_id, **position.to_dict()},
        ["The world and the session are out of sync; inspect the construct"],
    )


def resolve_next_connection(world: World, locator: ElementLocator) -> TileCoords:
    """
    Query the world for where the next piece connects.

    Advances the connectivity iterator once if the element itself does not
    report a next position.

    Raises:
        NoNextConnectionError: If no next position is available
    """
    iterator = world.get_connectivity_iterator(locator.position, locator.element_index)
    next_position = iterator.next_position if iterator is not None else None
    if next_position is None and iterator is not None and iterator.advance():
        next_position = iterator.next_position

    if next_position is None:
        raise NoNextConnectionError(
            "World reported no next connection point for the placed piece",
            {"tileX": locator.tile_x, "tileY": locator.tile_y, "elementIndex": locator.element_index},
        )
    return next_position.to_tile()


async def place_piece(ctx: ServerContext, params: PlacePieceParams) -> PlacePieceResult:
    """
    Place one track piece and record it in the construct's session.

    Raises:
        PlacementRejectedError: If the world refused the placement
        ActionTimeoutError: If the world did not answer in time
        ElementNotFoundError: If the placed element cannot be found
        NoNextConnectionError: If the next connection point is unknown
    """
    position = TileCoords(params.x, params.y, params.z, params.direction)
    world_position = position.to_world()
    flags = params.track_place_flags
    if params.chain_lift:
        flags |= CHAIN_LIFT_FLAG

    args = {
        **world_position.to_dict(),
        "ride": params.construct_id,
        "trackType": params.piece_type,
        "brakeSpeed": params.brake_speed,
        "colour": params.colour,
        "seatRotation": params.seat_rotation,
        "trackPlaceFlags": flags,
        "isFromTrackDesign": params.is_from_track_design,
    }
    if params.ride_type is not None:
        args["rideType"] = params.ride_type

    async with ctx.sessions.lock(params.construct_id):
        await ctx.execute_action(ACTION_PLACE_PIECE, args, error_cls=PlacementRejectedError)

        locator = locate_placed_element(
            ctx.world, params.construct_id, position, params.piece_type
        )
        next_point = resolve_next_connection(ctx.world, locator)

        station = is_station_piece(params.piece_type)
        record = PlacementRecord(
            position=position,
            piece_type=params.piece_type,
            next_point=next_point,
            locator=locator,
            is_station=station,
            flags=flags,
        )
        session = ctx.sessions.get_or_create(params.construct_id)
        complete = session.push(record)

    logger.info(
        f"Construct {params.construct_id}: placed {piece_name(params.piece_type)} at "
        f"({position.x}, {position.y}, {position.z}) dir {position.direction}, "
        f"next ({next_point.x}, {next_point.y}, {next_point.z}) dir {next_point.direction}"
    )

    if complete:
        message = "Track piece placed. Circuit complete!"
    else:
        message = "Track piece placed."
    if station:
        message += " Station piece detected."

    return PlacePieceResult(
        next_position=next_point,
        is_circuit_complete=complete,
        history_length=len(session.history),
        message=message,
        station_detected=station,
    )


def get_valid_next_pieces(ctx: ServerContext, construct_id: int) -> ValidNextPiecesResult:
    """
    Compute which pieces may legally follow a construct's last piece.

    An empty track may only start with flat or station pieces.

    Raises:
        ConstructNotFoundError: If the construct does not exist
    """
    ctx.require_construct(construct_id)
    session = ctx.sessions.get(construct_id)
    last = session.last if session else None

    if last is None:
        state, legal = legal_next_pieces(None)
        return ValidNextPiecesResult(
            valid_pieces=sorted(legal), last_piece_type=None, state_category=state
        )

    state, legal = legal_next_pieces(last.piece_type, last.is_station)
    warning = None
    if not last.is_station and not is_known_piece(last.piece_type):
        warning = f"{UNKNOWN_ANOMALY}: piece type {last.piece_type} is unknown, treated as flat"

    return ValidNextPiecesResult(
        valid_pieces=sorted(legal),
        last_piece_type=last.piece_type,
        state_category=state,
        position=last.next_point,
        warning=warning,
    )


async def delete_last_piece(ctx: ServerContext, construct_id: int) -> UndoResult:
    """
    Remove the most recently placed piece.

    The session record is only popped once the world confirms removal.

    Raises:
        NothingToUndoError: If the session has no placements
        PlacementRejectedError: If the world refused the removal
    """
    async with ctx.sessions.lock(construct_id):
        session: Session | None = ctx.sessions.get(construct_id)
        if session is None or not session.history:
            raise NothingToUndoError(construct_id)

        record = session.history[-1]
        locator = record.locator
        await ctx.execute_action(
            ACTION_REMOVE_PIECE,
            {
                **locator.position.to_dict(),
                "ride": construct_id,
                "trackType": record.piece_type,
                "sequence": locator.sequence,
                "elementIndex": locator.element_index,
            },
            error_cls=PlacementRejectedError,
        )
        session.pop()

    logger.info(f"Construct {construct_id}: removed {piece_name(record.piece_type)}")
    return UndoResult(
        remaining=len(session.history),
        next_position=session.next_point,
        is_circuit_complete=session.is_complete,
        removed_piece_type=record.piece_type,
    )


def get_session(ctx: ServerContext, construct_id: int) -> dict:
    """Describe a construct's session, or an empty one if none exists."""
    ctx.require_construct(construct_id)
    session = ctx.sessions.get(construct_id)
    if session is None:
        session = Session(construct_id=construct_id, fixed_origin=ctx.sessions.fixed_origin)
    return session.to_dict()
