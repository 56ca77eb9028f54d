"""Entrance and exit placement beside a construct's first station piece."""

from __future__ import annotations

import asyncio
import logging

from ride_tools.api.context import ServerContext
from ride_tools.api.types import EntranceExitResult, PortalPlacement
from ride_tools.exceptions import (
    NoStationFoundError,
    PlacementRejectedError,
    RideToolsError,
)
from ride_tools.track.coords import TileCoords, opposite, rotate
from ride_tools.track.pieces import is_station_piece
from ride_tools.world.base import ACTION_PLACE_ENTRANCE_EXIT, ELEMENT_TRACK, World

logger = logging.getLogger(__name__)


def find_station(world: World, construct_id: int) -> TileCoords | None:
    """
    Find the first station element of a construct.

    Tiles are scanned row by row (y outer, x inner), so the result is
    deterministic for a given world.

    Returns:
        Tile position and direction of the station element, or None
    """
    size = world.map_size
    for y in range(size):
        for x in range(size):
            tile = world.get_tile(x, y)
            if tile is None:
                continue
            for element in tile.elements:
                if (
                    element.type == ELEMENT_TRACK
                    and element.construct_id == construct_id
                    and is_station_piece(element.piece_type)
                ):
                    return TileCoords(x, y, element.base_height, element.direction)
    return None


def derive_portals(station: TileCoords) -> tuple[PortalPlacement, PortalPlacement]:
    """
    Compute entrance and exit positions for a station tile.

    The entrance sits on the left of the direction of travel and faces the
    station; the exit sits on the right and faces away from it. Both
    therefore point in the same direction.

    Returns:
        (entrance, exit)
    """
    right = rotate(station.direction, 1)
    left_tile = station.step(opposite(right))
    right_tile = station.step(right)
    entrance = PortalPlacement(x=left_tile.x, y=left_tile.y, direction=right)
    exit_ = PortalPlacement(x=right_tile.x, y=right_tile.y, direction=right)
    return entrance, exit_


async def _place_portal(
    ctx: ServerContext, construct_id: int, portal: PortalPlacement, is_exit: bool
) -> None:
    world_position = TileCoords(portal.x, portal.y, 0, portal.direction).to_world()
    await ctx.execute_action(
        ACTION_PLACE_ENTRANCE_EXIT,
        {
            "x": world_position.x,
            "y": world_position.y,
            "direction": portal.direction,
            "ride": construct_id,
            "station": 0,
            "isExit": is_exit,
        },
        error_cls=PlacementRejectedError,
    )


async def place_entrance_exit(ctx: ServerContext, construct_id: int) -> EntranceExitResult:
    """
    Place a construct's entrance and exit beside its first station.

    Both placements are issued concurrently and joined. One failing side is
    reported as a warning; both failing is an error.

    Raises:
        ConstructNotFoundError: If the construct does not exist
        NoStationFoundError: If the construct has no station piece
        PlacementRejectedError: If both placements failed
    """
    ctx.require_construct(construct_id)

    async with ctx.sessions.lock(construct_id):
        station = find_station(ctx.world, construct_id)
        if station is None:
            raise NoStationFoundError(construct_id)

        entrance, exit_ = derive_portals(station)
        outcomes = await asyncio.gather(
            _place_portal(ctx, construct_id, entrance, is_exit=False),
            _place_portal(ctx, construct_id, exit_, is_exit=True),
            return_exceptions=True,
        )

    failures: dict[str, str] = {}
    for side, outcome in zip(("entrance", "exit"), outcomes):
        if isinstance(outcome, RideToolsError):
            failures[side] = outcome.message
        elif isinstance(outcome, BaseException):
            raise outcome

    if len(failures) == 2:
        raise PlacementRejectedError(
            ACTION_PLACE_ENTRANCE_EXIT,
            f"entrance: {failures['entrance']}; exit: {failures['exit']}",
            {"constructId": construct_id, "station": station.to_dict(), "failed": failures},
            ["Clear the tiles beside the station and retry"],
        )

    warning = None
    if failures:
        side, reason = next(iter(failures.items()))
        warning = f"{side.capitalize()} placement failed: {reason}"
        logger.warning(f"Construct {construct_id}: {warning}")

    return EntranceExitResult(
        entrance=None if "entrance" in failures else entrance,
        exit=None if "exit" in failures else exit_,
        warning=warning,
    )
