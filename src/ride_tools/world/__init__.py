"""World collaborators: the abstract interface and the in-memory sandbox."""

from ride_tools.world.base import (
    ActionResult,
    ConnectivityIterator,
    ConstructInfo,
    SegmentTypeInfo,
    Tile,
    TileElement,
    World,
)
from ride_tools.world.sandbox import SandboxWorld

__all__ = [
    "ActionResult",
    "ConnectivityIterator",
    "ConstructInfo",
    "SandboxWorld",
    "SegmentTypeInfo",
    "Tile",
    "TileElement",
    "World",
]
