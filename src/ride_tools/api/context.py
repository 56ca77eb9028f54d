"""Shared state handed to every endpoint handler.

The context bundles the world collaborator, the session store and the
action timeout, and wraps action execution so that every call is bounded
and every failure comes back as a RideToolsError.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any

from ride_tools.api.session_store import SessionStore
from ride_tools.exceptions import (
    ActionFailedError,
    ActionTimeoutError,
    ConstructNotFoundError,
)
from ride_tools.world.base import ConstructInfo, World

logger = logging.getLogger(__name__)

DEFAULT_ACTION_TIMEOUT = 10.0


@dataclass
class ServerContext:
    """
    Dependencies shared by endpoint handlers.

    Attributes:
        world: The world being built into
        sessions: Construction sessions, one per construct
        action_timeout: Seconds to wait for each world action
    """

    world: World
    sessions: SessionStore = field(default_factory=SessionStore)
    action_timeout: float = DEFAULT_ACTION_TIMEOUT

    def require_construct(self, construct_id: int) -> ConstructInfo:
        """
        Look up a construct.

        Raises:
            ConstructNotFoundError: If the world has no such construct
        """
        info = self.world.find_construct(construct_id)
        if info is None:
            raise ConstructNotFoundError(construct_id)
        return info

    async def execute_action(
        self,
        name: str,
        args: dict[str, Any],
        error_cls: type[ActionFailedError] = ActionFailedError,
    ) -> dict[str, Any]:
        """
        Run a world action with the configured timeout.

        The action runs in its own task, so a timeout or a cancelled caller
        does not cancel the mutation itself; the world may still apply it.

        Args:
            name: Action name
            args: Action arguments
            error_cls: ActionFailedError subclass raised on failure

        Returns:
            The action's output fields

        Raises:
            ActionTimeoutError: If the action did not finish in time
            ActionFailedError: (or ``error_cls``) if the action reported an
                error or returned no result
        """
        logger.debug(f"Executing action {name} with {args}")
        task = asyncio.ensure_future(self.world.execute_action(name, args))
        try:
            result = await asyncio.wait_for(asyncio.shield(task), timeout=self.action_timeout)
        except asyncio.TimeoutError:
            logger.warning(f"Action {name} timed out after {self.action_timeout}s")
            task.add_done_callback(_log_late_completion(name))
            raise ActionTimeoutError(name, self.action_timeout) from None

        if result is None:
            raise error_cls(name, "No result returned by the action layer", {"args": args})
        if not result.ok:
            raise error_cls(name, result.error, {"args": args})
        return result.data


def _log_late_completion(name: str):
    def callback(task: asyncio.Future) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.warning(f"Timed-out action {name} later raised: {exc}")
        else:
            logger.info(f"Timed-out action {name} completed after its caller gave up")

    return callback
