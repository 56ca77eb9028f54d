"""Pytest fixtures for ride-tools tests."""

from __future__ import annotations

import asyncio

import pytest

from ride_tools.api.context import ServerContext
from ride_tools.api.dispatcher import Dispatcher
from ride_tools.api.session_store import SessionStore
from ride_tools.world.sandbox import SandboxWorld


@pytest.fixture
def world() -> SandboxWorld:
    """A small, empty sandbox world."""
    return SandboxWorld(map_size=64)


@pytest.fixture
def ctx(world: SandboxWorld) -> ServerContext:
    """Server context over the sandbox world with a short action timeout."""
    return ServerContext(world=world, sessions=SessionStore(), action_timeout=2.0)


@pytest.fixture
def dispatcher(ctx: ServerContext) -> Dispatcher:
    return Dispatcher(ctx)


@pytest.fixture
def run():
    """Run a coroutine to completion on a fresh event loop."""

    def _run(coro):
        return asyncio.run(coro)

    return _run

