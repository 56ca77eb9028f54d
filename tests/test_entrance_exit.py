"""Tests for entrance/exit resolution and placement."""

from __future__ import annotations

import pytest

from ride_tools.api.params import PlacePieceParams
from ride_tools.api.tools.constructs import create_construct
from ride_tools.api.tools.entrance import derive_portals, find_station, place_entrance_exit
from ride_tools.api.tools.placement import place_piece
from ride_tools.api.types import PortalPlacement
from ride_tools.exceptions import (
    ConstructNotFoundError,
    NoStationFoundError,
    PlacementRejectedError,
)
from ride_tools.track.coords import TileCoords
from ride_tools.track.pieces import PieceType
from ride_tools.world.base import ELEMENT_ENTRANCE, ELEMENT_EXIT

P = PieceType


async def build(ctx, *pieces: tuple[int, int, int, int, int]) -> int:
    """Create a construct and place (x, y, z, direction, pieceType) pieces."""
    cid = await create_construct(
        ctx, type_id=52, object_id=1, entrance_object_id=0, colour1=0, colour2=0
    )
    for x, y, z, direction, piece_type in pieces:
        await place_piece(
            ctx,
            PlacePieceParams(
                x=x, y=y, z=z, direction=direction, constructId=cid, pieceType=piece_type
            ),
        )
    return cid


class TestDerivePortals:
    """Tests for derive_portals()."""

    def test_facing_positive_x(self):
        entrance, exit_ = derive_portals(TileCoords(5, 5, 0, 0))
        assert entrance == PortalPlacement(x=5, y=4, direction=1)
        assert exit_ == PortalPlacement(x=5, y=6, direction=1)

    def test_facing_positive_y(self):
        entrance, exit_ = derive_portals(TileCoords(10, 10, 0, 1))
        assert entrance == PortalPlacement(x=11, y=10, direction=2)
        assert exit_ == PortalPlacement(x=9, y=10, direction=2)

    @pytest.mark.parametrize("direction", range(4))
    def test_portals_flank_station(self, direction):
        station = TileCoords(8, 8, 0, direction)
        entrance, exit_ = derive_portals(station)
        assert (entrance.x + exit_.x) / 2 == station.x
        assert (entrance.y + exit_.y) / 2 == station.y
        assert entrance.direction == exit_.direction == (direction + 1) % 4


class TestFindStation:
    """Tests for find_station()."""

    def test_finds_first_station_in_row_order(self, ctx, run):
        cid = run(
            build(
                ctx,
                (5, 5, 0, 0, P.FLAT),
                (6, 5, 0, 0, P.BEGIN_STATION),
                (7, 5, 0, 0, P.END_STATION),
            )
        )
        assert find_station(ctx.world, cid) == TileCoords(6, 5, 0, 0)

    def test_no_station(self, ctx, run):
        cid = run(build(ctx, (5, 5, 0, 0, P.FLAT)))
        assert find_station(ctx.world, cid) is None


class TestPlaceEntranceExit:
    """Tests for place_entrance_exit()."""

    def test_both_placed(self, ctx, run):
        async def scenario():
            cid = await build(ctx, (5, 5, 0, 0, P.BEGIN_STATION))
            return await place_entrance_exit(ctx, cid)

        result = run(scenario())

        assert result.entrance == PortalPlacement(5, 4, 1)
        assert result.exit == PortalPlacement(5, 6, 1)
        assert result.warning is None
        assert [e.type for e in ctx.world.get_tile(5, 4).elements] == [ELEMENT_ENTRANCE]
        assert [e.type for e in ctx.world.get_tile(5, 6).elements] == [ELEMENT_EXIT]

    def test_partial_success_warns(self, ctx, run):
        async def scenario():
            cid = await build(ctx, (5, 5, 0, 0, P.BEGIN_STATION), (5, 6, 0, 0, P.FLAT))
            return await place_entrance_exit(ctx, cid)

        result = run(scenario())

        assert result.entrance == PortalPlacement(5, 4, 1)
        assert result.exit is None
        assert result.warning.startswith("Exit placement failed")
        assert "Tile occupied" in result.warning
        assert result.to_dict()["exit"] is None

    def test_both_fail(self, ctx, run):
        async def scenario():
            cid = await build(
                ctx,
                (5, 5, 0, 0, P.BEGIN_STATION),
                (5, 6, 0, 0, P.FLAT),
                (5, 4, 0, 0, P.FLAT),
            )
            with pytest.raises(PlacementRejectedError) as exc_info:
                await place_entrance_exit(ctx, cid)
            return exc_info.value

        error = run(scenario())

        assert "entrance:" in error.message
        assert "exit:" in error.message
        assert set(error.context["failed"]) == {"entrance", "exit"}

    def test_no_station(self, ctx, run):
        async def scenario():
            cid = await build(ctx, (5, 5, 0, 0, P.FLAT))
            with pytest.raises(NoStationFoundError):
                await place_entrance_exit(ctx, cid)

        run(scenario())

    def test_unknown_construct(self, ctx, run):
        async def scenario():
            with pytest.raises(ConstructNotFoundError):
                await place_entrance_exit(ctx, 9)

        run(scenario())
