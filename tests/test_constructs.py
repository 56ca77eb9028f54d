"""Tests for construct-level endpoints."""

from __future__ import annotations

import pytest

from ride_tools.api.context import ServerContext
from ride_tools.api.params import PlacePieceParams
from ride_tools.api.tools.constructs import (
    create_construct,
    delete_all,
    demolish,
    dump_construct,
    get_stats,
    list_all,
    list_all_segments,
    start_test,
)
from ride_tools.api.tools.placement import place_piece
from ride_tools.api.types import RideStats
from ride_tools.exceptions import ActionFailedError, ConstructNotFoundError
from ride_tools.track.pieces import PIECE_CATALOG, PieceType
from ride_tools.world.base import ACTION_DEMOLISH, STATUS_TESTING, ActionResult, ConstructInfo
from ride_tools.world.sandbox import SandboxWorld


async def new_construct(ctx: ServerContext, type_id: int = 52) -> int:
    return await create_construct(
        ctx, type_id=type_id, object_id=1, entrance_object_id=0, colour1=3, colour2=4
    )


class TestCreate:
    """Tests for create_construct()."""

    def test_create_returns_id_and_session(self, ctx, run):
        cid = run(new_construct(ctx))
        assert cid == 0
        assert ctx.sessions.get(cid).history == []

    def test_ids_increment(self, ctx, run):
        async def scenario():
            return [await new_construct(ctx) for _ in range(3)]

        assert run(scenario()) == [0, 1, 2]

    def test_world_rejects(self, ctx, run):
        async def scenario():
            with pytest.raises(ActionFailedError, match="Invalid ride object"):
                await create_construct(
                    ctx, type_id=52, object_id=-1, entrance_object_id=0, colour1=0, colour2=0
                )

        run(scenario())
        assert len(ctx.sessions) == 0


class TestListing:
    """Tests for list_all() and list_all_segments()."""

    def test_list_all_empty(self, ctx):
        assert list_all(ctx) == []

    def test_list_all(self, ctx, run):
        run(new_construct(ctx))
        summaries = [s.to_dict() for s in list_all(ctx)]
        assert summaries == [{"id": 0, "name": "Looping Roller Coaster 1", "type": 52}]

    def test_list_all_segments(self, ctx):
        segments = list_all_segments(ctx)
        assert len(segments) == len(PIECE_CATALOG)
        flat = next(s for s in segments if s["type"] == PieceType.FLAT)
        assert flat["description"] == "Flat"
        assert flat["length"] == 1
        assert flat["geometry"]["exit"] == {"forward": 1, "lateral": 0}


class TestStatsAndTesting:
    """Tests for start_test() and get_stats()."""

    def test_stats_unrated(self, ctx, run):
        cid = run(new_construct(ctx))
        stats = get_stats(ctx, cid)
        assert stats == RideStats(excitement=None, intensity=None, nausea=None)

    def test_start_test_requires_track(self, ctx, run):
        async def scenario():
            cid = await new_construct(ctx)
            with pytest.raises(ActionFailedError, match="no track"):
                await start_test(ctx, cid)

        run(scenario())

    def test_start_test_rates(self, ctx, run):
        async def scenario():
            cid = await new_construct(ctx)
            await place_piece(
                ctx,
                PlacePieceParams(x=5, y=5, z=0, direction=0, constructId=cid, pieceType=0),
            )
            message = await start_test(ctx, cid)
            return cid, message

        cid, message = run(scenario())

        assert message == "Construct started in test mode."
        assert ctx.world.find_construct(cid).status == STATUS_TESTING
        assert get_stats(ctx, cid).to_dict() == {
            "excitement": 1.0,
            "intensity": 0.5,
            "nausea": 0.2,
        }

    def test_stats_unknown_construct(self, ctx):
        with pytest.raises(ConstructNotFoundError):
            get_stats(ctx, 3)

    def test_stats_normalization(self):
        info = ConstructInfo(id=0, name="x", type=0, excitement=652, intensity=0, nausea=-1)
        assert RideStats.from_info(info) == RideStats(excitement=6.52, intensity=0.0, nausea=None)


class TestDemolish:
    """Tests for demolish(), dump_construct() and delete_all()."""

    def test_dump(self, ctx, run):
        cid = run(new_construct(ctx))
        dump = dump_construct(ctx, cid)["construct"]
        assert dump["id"] == cid
        assert dump["colour1"] == 3
        assert dump["pieceCount"] == 0

    def test_demolish_discards_session(self, ctx, run):
        async def scenario():
            cid = await new_construct(ctx)
            return cid, await demolish(ctx, cid)

        cid, message = run(scenario())

        assert message == f"Construct {cid} demolished."
        assert cid not in ctx.sessions
        assert ctx.world.find_construct(cid) is None

    def test_demolish_unknown(self, ctx, run):
        async def scenario():
            with pytest.raises(ConstructNotFoundError):
                await demolish(ctx, 8)

        run(scenario())

    def test_delete_all_nothing(self, ctx, run):
        result = run(delete_all(ctx))
        assert result.message == "No constructs to demolish."
        assert result.demolished == []

    def test_delete_all(self, ctx, run):
        async def scenario():
            for _ in range(3):
                await new_construct(ctx)
            return await delete_all(ctx)

        result = run(scenario())

        assert result.demolished == [0, 1, 2]
        assert result.message == "All 3 construct(s) have been demolished."
        assert len(ctx.sessions) == 0
        assert list_all(ctx) == []


class _StubbornWorld(SandboxWorld):
    """Refuses to demolish construct 1."""

    async def execute_action(self, name, args):
        if name == ACTION_DEMOLISH and args.get("ride") == 1:
            return ActionResult(error="Ride is in use")
        return await super().execute_action(name, args)


class TestDeleteAllPartialFailure:
    """deleteAll keeps going past a failed demolish."""

    def test_partial_failure(self, run):
        ctx = ServerContext(world=_StubbornWorld(map_size=64))

        async def scenario():
            for _ in range(3):
                await new_construct(ctx)
            with pytest.raises(ActionFailedError) as exc_info:
                await delete_all(ctx)
            return exc_info.value

        error = run(scenario())

        assert error.context["demolished"] == [0, 2]
        assert 1 in error.context["failed"]
        assert "Ride is in use" in error.context["failed"][1]
        assert 1 in ctx.sessions
        assert 0 not in ctx.sessions
        assert 2 not in ctx.sessions


class _TimedWorld(SandboxWorld):
    """Records when each demolish starts and finishes."""

    def __init__(self) -> None:
        super().__init__(map_size=64, latency=0.01)
        self.events: list[tuple[str, int]] = []

    async def execute_action(self, name, args):
        if name != ACTION_DEMOLISH:
            return await super().execute_action(name, args)
        self.events.append(("start", args["ride"]))
        try:
            return await super().execute_action(name, args)
        finally:
            self.events.append(("end", args["ride"]))


class TestDeleteAllOrdering:
    """deleteAll demolishes one construct at a time."""

    def test_demolishes_never_overlap(self, run):
        world = _TimedWorld()
        ctx = ServerContext(world=world, action_timeout=2.0)

        async def scenario():
            for _ in range(3):
                await new_construct(ctx)
            return await delete_all(ctx)

        result = run(scenario())

        assert result.demolished == [0, 1, 2]
        assert world.events == [
            ("start", 0),
            ("end", 0),
            ("start", 1),
            ("end", 1),
            ("start", 2),
            ("end", 2),
        ]
