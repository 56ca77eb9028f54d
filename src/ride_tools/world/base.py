"""
Base interface for the simulated world.

The protocol layer never stores world state itself. Everything it needs from
the world (constructs, tiles, connectivity and the asynchronous action layer)
goes through this interface.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from ride_tools.track.coords import WorldCoords

# Element type tags
ELEMENT_TRACK = "track"
ELEMENT_ENTRANCE = "entrance"
ELEMENT_EXIT = "exit"

# Action names understood by the world
ACTION_CREATE = "ridecreate"
ACTION_DEMOLISH = "ridedemolish"
ACTION_SET_STATUS = "ridesetstatus"
ACTION_PLACE_PIECE = "trackplace"
ACTION_REMOVE_PIECE = "trackremove"
ACTION_PLACE_ENTRANCE_EXIT = "rideentranceexitplace"

STATUS_CLOSED = 0
STATUS_OPEN = 1
STATUS_TESTING = 2


@dataclass
class ConstructInfo:
    """A construct (ride) as reported by the world.

    Ratings are fixed two-decimal integers (652 means 6.52); a negative value
    means the rating has not been computed.
    """

    id: int
    name: str
    type: int
    excitement: int = -1
    intensity: int = -1
    nausea: int = -1
    status: int = STATUS_CLOSED


@dataclass
class SegmentTypeInfo:
    """A piece type the world can build."""

    type: int
    description: str
    group: str
    length: int
    geometry: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "type": self.type,
            "description": self.description,
            "group": self.group,
            "length": self.length,
            "geometry": self.geometry,
        }


@dataclass(frozen=True)
class TileElement:
    """One element stored on a tile.

    Attributes:
        type: Element type tag ("track", "entrance", "exit")
        construct_id: Owning construct id
        base_height: Base height in height units
        piece_type: Track piece id (track elements only)
        direction: Facing, 0-3
        sequence: Index of this tile within a multi-tile piece
    """

    type: str
    construct_id: int
    base_height: int
    piece_type: int = -1
    direction: int = 0
    sequence: int = 0


@dataclass
class Tile:
    """A map tile and the elements stacked on it."""

    x: int
    y: int
    elements: list[TileElement] = field(default_factory=list)


@dataclass
class ActionResult:
    """Outcome of an executed action.

    Attributes:
        error: Non-empty when the action failed
        data: Output fields of the action (e.g. the new construct id)
    """

    error: str | None = None
    data: dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.error


class ConnectivityIterator(ABC):
    """Walks the track from a placed element to the next connection point."""

    @property
    @abstractmethod
    def next_position(self) -> WorldCoords | None:
        """Where the next piece connects, or None if unknown."""
        ...

    @abstractmethod
    def advance(self) -> bool:
        """Step to the next piece. Returns False when there is none."""
        ...


class World(ABC):
    """
    Abstract base class for the world the server builds into.

    Implementations wrap a live game instance or, for development and
    tests, an in-memory sandbox.
    """

    @property
    @abstractmethod
    def map_size(self) -> int:
        """Number of tiles along each map axis."""
        ...

    @abstractmethod
    def find_all_constructs(self) -> list[ConstructInfo]:
        """List every construct in the world."""
        ...

    @abstractmethod
    def find_construct(self, construct_id: int) -> ConstructInfo | None:
        """Look up a construct by id."""
        ...

    @abstractmethod
    def dump_construct(self, construct_id: int) -> dict[str, Any] | None:
        """Return every readable field of a construct, or None if missing."""
        ...

    @abstractmethod
    def list_all_segment_types(self) -> list[SegmentTypeInfo]:
        """List every piece type the world can place."""
        ...

    @abstractmethod
    async def execute_action(self, name: str, args: dict[str, Any]) -> ActionResult | None:
        """
        Execute a world action.

        Args:
            name: Action name (see the ACTION_* constants)
            args: Action arguments, world-space coordinates

        Returns:
            ActionResult with either output data or an error string
        """
        ...

    @abstractmethod
    def get_tile(self, x: int, y: int) -> Tile | None:
        """Get a tile by tile coordinates, or None when off the map."""
        ...

    @abstractmethod
    def get_connectivity_iterator(
        self, position: WorldCoords, element_index: int
    ) -> ConnectivityIterator | None:
        """
        Get a connectivity iterator for a track element.

        Args:
            position: World position of the element's tile
            element_index: Index of the element within the tile

        Returns:
            Iterator positioned on the element, or None if it is not track
        """
        ...
