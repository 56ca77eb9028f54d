"""Construct-level endpoints.

Listing, creating, testing, rating and demolishing constructs. None of these
touch track geometry; they translate protocol requests into world queries
and actions and keep the session store in step with the world.
"""

from __future__ import annotations

import logging
from typing import Any

from ride_tools.api.context import ServerContext
from ride_tools.api.types import ConstructSummary, DeleteAllResult, RideStats
from ride_tools.exceptions import ActionFailedError, RideToolsError
from ride_tools.world.base import (
    ACTION_CREATE,
    ACTION_DEMOLISH,
    ACTION_SET_STATUS,
    STATUS_TESTING,
)

logger = logging.getLogger(__name__)

DEMOLISH = 0


def list_all(ctx: ServerContext) -> list[ConstructSummary]:
    """List every construct in the world."""
    return [ConstructSummary.from_info(info) for info in ctx.world.find_all_constructs()]


def list_all_segments(ctx: ServerContext) -> list[dict[str, Any]]:
    """List every piece type the world can place."""
    return [segment.to_dict() for segment in ctx.world.list_all_segment_types()]


async def create_construct(
    ctx: ServerContext,
    type_id: int,
    object_id: int,
    entrance_object_id: int,
    colour1: int,
    colour2: int,
) -> int:
    """
    Create a construct and a fresh, empty construction session for it.

    Returns:
        The new construct id

    Raises:
        ActionFailedError: If the world refused to create the construct
    """
    data = await ctx.execute_action(
        ACTION_CREATE,
        {
            "rideType": type_id,
            "rideObject": object_id,
            "entranceObject": entrance_object_id,
            "colour1": colour1,
            "colour2": colour2,
        },
    )
    construct_id = data.get("ride")
    if not isinstance(construct_id, int):
        raise ActionFailedError(ACTION_CREATE, "Result did not include the new construct id")

    ctx.sessions.create(construct_id)
    logger.info(f"Created construct {construct_id} (type {type_id})")
    return construct_id


async def start_test(ctx: ServerContext, construct_id: int) -> str:
    """Put a construct into test-run mode."""
    ctx.require_construct(construct_id)
    await ctx.execute_action(ACTION_SET_STATUS, {"ride": construct_id, "status": STATUS_TESTING})
    return "Construct started in test mode."


def get_stats(ctx: ServerContext, construct_id: int) -> RideStats:
    """Fetch a construct's normalized ratings."""
    return RideStats.from_info(ctx.require_construct(construct_id))


def dump_construct(ctx: ServerContext, construct_id: int) -> dict[str, Any]:
    """Return every field the world exposes for a construct."""
    ctx.require_construct(construct_id)
    dump = ctx.world.dump_construct(construct_id) or {}
    return {"construct": dump}


async def demolish(ctx: ServerContext, construct_id: int) -> str:
    """Demolish one construct and discard its session."""
    ctx.require_construct(construct_id)
    async with ctx.sessions.lock(construct_id):
        await ctx.execute_action(ACTION_DEMOLISH, {"ride": construct_id, "modifyType": DEMOLISH})
        ctx.sessions.discard(construct_id)
    return f"Construct {construct_id} demolished."


async def delete_all(ctx: ServerContext) -> DeleteAllResult:
    """
    Demolish every construct, one after another.

    Each demolish completes before the next begins. A failure does not stop
    the sweep; constructs that could not be demolished keep their sessions.

    Raises:
        ActionFailedError: After the sweep, if any demolish failed
    """
    constructs = ctx.world.find_all_constructs()
    if not constructs:
        return DeleteAllResult(message="No constructs to demolish.")

    demolished: list[int] = []
    failures: dict[int, str] = {}
    for info in constructs:
        try:
            async with ctx.sessions.lock(info.id):
                await ctx.execute_action(ACTION_DEMOLISH, {"ride": info.id, "modifyType": DEMOLISH})
                ctx.sessions.discard(info.id)
        except RideToolsError as e:
            logger.warning(f"Failed to demolish construct {info.id}: {e.message}")
            failures[info.id] = e.message
            continue
        demolished.append(info.id)

    if failures:
        raise ActionFailedError(
            ACTION_DEMOLISH,
            f"{len(failures)} of {len(constructs)} construct(s) could not be demolished",
            {"failed": failures, "demolished": demolished},
            ["Retry deleteAll, or demolish the remaining constructs individually"],
        )

    return DeleteAllResult(
        message=f"All {len(demolished)} construct(s) have been demolished.",
        demolished=demolished,
    )
