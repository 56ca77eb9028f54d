"""Tests for the in-memory sandbox world."""

from __future__ import annotations

from ride_tools.track.coords import TileCoords, WorldCoords
from ride_tools.track.pieces import PieceType
from ride_tools.world.base import (
    ACTION_CREATE,
    ACTION_PLACE_PIECE,
    ACTION_REMOVE_PIECE,
    ELEMENT_TRACK,
)
from ride_tools.world.sandbox import PIECE_GEOMETRY, SandboxWorld, local_to_tile

P = PieceType


async def _create(world: SandboxWorld) -> int:
    result = await world.execute_action(ACTION_CREATE, {"rideType": 52, "rideObject": 1})
    return result.data["ride"]


async def _place(world: SandboxWorld, ride: int, tile: TileCoords, piece: int):
    args = {**tile.to_world().to_dict(), "ride": ride, "trackType": piece}
    return await world.execute_action(ACTION_PLACE_PIECE, args)


class TestGeometry:
    """Tests for piece geometry helpers."""

    def test_every_catalog_piece_has_geometry(self):
        from ride_tools.track.pieces import PIECE_CATALOG

        assert set(PIECE_CATALOG) <= set(PIECE_GEOMETRY)

    def test_local_to_tile_rotates(self):
        origin = TileCoords(5, 5, 0, 1)  # facing +y
        assert local_to_tile(origin, 1, 0) == (5, 6)
        assert local_to_tile(origin, 0, 1) == (4, 5)  # right of travel is -x

    def test_turn_geometry(self):
        geometry = PIECE_GEOMETRY[P.RIGHT_QUARTER_TURN_3_TILES]
        assert geometry.footprint == ((0, 0), (1, 0), (1, 1))
        assert geometry.exit == (1, 2)
        assert geometry.turn == 1


class TestPlacement:
    """Tests for the trackplace action."""

    def test_place_medium_turn(self, run):
        world = SandboxWorld(map_size=32)

        async def scenario():
            ride = await _create(world)
            result = await _place(world, ride, TileCoords(5, 5, 0, 0), P.RIGHT_QUARTER_TURN_3_TILES)
            return ride, result

        ride, result = run(scenario())

        assert result.ok
        for x, y in ((5, 5), (6, 5), (6, 6)):
            (element,) = world.get_tile(x, y).elements
            assert element.type == ELEMENT_TRACK
            assert element.construct_id == ride
        iterator = world.get_connectivity_iterator(WorldCoords(160, 160, 0), 0)
        assert iterator.next_position == TileCoords(6, 7, 0, 1).to_world()

    def test_collision(self, run):
        world = SandboxWorld(map_size=32)

        async def scenario():
            ride = await _create(world)
            await _place(world, ride, TileCoords(5, 5, 0, 0), P.FLAT)
            clash = await _place(world, ride, TileCoords(5, 5, 1, 2), P.FLAT)
            above = await _place(world, ride, TileCoords(5, 5, 4, 2), P.FLAT)
            return clash, above

        clash, above = run(scenario())

        assert clash.error == "There's already something there"
        assert above.ok
        assert len(world.get_tile(5, 5).elements) == 2

    def test_off_map(self, run):
        world = SandboxWorld(map_size=8)

        async def scenario():
            ride = await _create(world)
            return await _place(world, ride, TileCoords(7, 7, 0, 0), P.RIGHT_QUARTER_TURN_3_TILES)

        assert run(scenario()).error == "Off edge of map!"
        assert world.get_tile(8, 0) is None

    def test_huge_coordinates_off_map(self, run):
        """Astronomically large positions are rejected, not crashed on."""
        world = SandboxWorld()

        async def scenario():
            ride = await _create(world)
            return await _place(world, ride, TileCoords(10**400, 5, 0, 0), P.FLAT)

        assert run(scenario()).error == "Off edge of map!"

    def test_unknown_action(self, run):
        result = run(SandboxWorld().execute_action("teleport", {}))
        assert result.error == "Unknown action: teleport"


class TestConnectivity:
    """Tests for SandboxIterator."""

    def test_advance_follows_track(self, run):
        world = SandboxWorld(map_size=32)

        async def scenario():
            ride = await _create(world)
            await _place(world, ride, TileCoords(5, 5, 0, 0), P.FLAT)
            await _place(world, ride, TileCoords(6, 5, 0, 0), P.FLAT_TO_UP_25)

        run(scenario())

        iterator = world.get_connectivity_iterator(TileCoords(5, 5, 0, 0).to_world(), 0)
        assert iterator.next_position.to_tile() == TileCoords(6, 5, 0, 0)
        assert iterator.advance() is True
        assert iterator.next_position.to_tile() == TileCoords(7, 5, 1, 0)
        assert iterator.advance() is False

    def test_no_iterator_for_empty_tile(self):
        world = SandboxWorld(map_size=32)
        assert world.get_connectivity_iterator(WorldCoords(0, 0, 0), 0) is None


class TestRemoval:
    """Tests for the trackremove action."""

    def test_remove_clears_all_tiles(self, run):
        world = SandboxWorld(map_size=32)

        async def scenario():
            ride = await _create(world)
            await _place(world, ride, TileCoords(5, 5, 0, 0), P.RIGHT_QUARTER_TURN_3_TILES)
            args = {"x": 160, "y": 160, "z": 0, "ride": ride, "elementIndex": 0}
            mismatch = await world.execute_action(
                ACTION_REMOVE_PIECE, {**args, "trackType": P.FLAT}
            )
            removed = await world.execute_action(
                ACTION_REMOVE_PIECE, {**args, "trackType": P.RIGHT_QUARTER_TURN_3_TILES}
            )
            return mismatch, removed

        mismatch, removed = run(scenario())

        assert mismatch.error == "Track type mismatch"
        assert removed.ok
        assert all(not world.get_tile(x, y).elements for x, y in ((5, 5), (6, 5), (6, 6)))
        assert world.dump_construct(0)["pieceCount"] == 0

    def test_remove_checks_sequence(self, run):
        """Removal through a later tile of a piece must name that tile's sequence."""
        world = SandboxWorld(map_size=32)

        async def scenario():
            ride = await _create(world)
            await _place(world, ride, TileCoords(5, 5, 0, 0), P.RIGHT_QUARTER_TURN_3_TILES)
            args = {
                "x": 192,
                "y": 160,
                "z": 0,
                "ride": ride,
                "elementIndex": 0,
                "trackType": P.RIGHT_QUARTER_TURN_3_TILES,
            }
            wrong = await world.execute_action(ACTION_REMOVE_PIECE, {**args, "sequence": 0})
            right = await world.execute_action(ACTION_REMOVE_PIECE, {**args, "sequence": 1})
            return wrong, right

        wrong, right = run(scenario())

        assert wrong.error == "Track sequence mismatch"
        assert right.ok
