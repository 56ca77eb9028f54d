"""Per-construct construction sessions.

Each construct being built has a Session holding the stack of placed pieces.
Placements push, undo pops, and the circuit is complete whenever the newest
piece's next connection point lands exactly on the session origin.

The store also serializes mutating requests for the same construct,
possibly from different connections, through one ``asyncio.Lock`` per
construct id. A lock only exists while some request holds or awaits it.

Example:
    >>> store = SessionStore()
    >>> session = store.create(3)
    >>> session.state
    <SessionState.EMPTY: 'empty'>
    >>> async with store.lock(3):
    ...     session.push(record)
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import AsyncIterator

from ride_tools.track.coords import TileCoords, WorldCoords

logger = logging.getLogger(__name__)

__all__ = ["ElementLocator", "PlacementRecord", "Session", "SessionState", "SessionStore"]


class SessionState(str, Enum):
    """Construction progress of a session."""

    EMPTY = "empty"
    BUILDING = "building"
    COMPLETE = "complete"


@dataclass(frozen=True)
class ElementLocator:
    """Where a placed piece lives in the world, for removing it again.

    Attributes:
        tile_x: Tile column holding the piece's element
        tile_y: Tile row holding the piece's element
        element_index: Index of the element within the tile
        position: World coordinates the piece was placed at
        sequence: Which tile of a multi-tile piece the element belongs to
    """

    tile_x: int
    tile_y: int
    element_index: int
    position: WorldCoords
    sequence: int = 0

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "tileX": self.tile_x,
            "tileY": self.tile_y,
            "elementIndex": self.element_index,
            "position": self.position.to_dict(),
            "sequence": self.sequence,
        }


@dataclass(frozen=True)
class PlacementRecord:
    """One placed piece.

    Attributes:
        position: Requested placement position (tile space)
        piece_type: Track piece id
        next_point: Where the following piece must be placed (tile space)
        locator: World locator used to undo the placement
        is_station: Whether the piece is a station piece
        flags: Effective placement flags sent to the world
    """

    position: TileCoords
    piece_type: int
    next_point: TileCoords
    locator: ElementLocator
    is_station: bool = False
    flags: int = 0

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "position": self.position.to_dict(),
            "pieceType": self.piece_type,
            "nextPosition": self.next_point.to_dict(),
            "locator": self.locator.to_dict(),
            "isStation": self.is_station,
            "flags": self.flags,
        }


@dataclass
class Session:
    """Construction state for one construct.

    Attributes:
        construct_id: Id of the construct being built
        history: Placed pieces, oldest first
        fixed_origin: Configured circuit origin; when None the first
            placed piece's position is the origin
        is_complete: True when the newest piece closes the circuit
    """

    construct_id: int
    history: list[PlacementRecord] = field(default_factory=list)
    fixed_origin: TileCoords | None = None
    is_complete: bool = False

    @property
    def origin(self) -> TileCoords | None:
        """Circuit origin the track must return to."""
        if self.fixed_origin is not None:
            return self.fixed_origin
        return self.history[0].position if self.history else None

    @property
    def last(self) -> PlacementRecord | None:
        return self.history[-1] if self.history else None

    @property
    def next_point(self) -> TileCoords | None:
        """Where the next piece must be placed, or None for an empty track."""
        return self.history[-1].next_point if self.history else None

    @property
    def state(self) -> SessionState:
        if not self.history:
            return SessionState.EMPTY
        return SessionState.COMPLETE if self.is_complete else SessionState.BUILDING

    def closes_circuit(self, next_point: TileCoords, first: TileCoords | None = None) -> bool:
        """
        Check whether a next connection point lands on the origin.

        Args:
            next_point: Candidate next connection point
            first: Position of the piece about to become history[0], used
                when the session is still empty

        Returns:
            True only on an exact match of x, y, z and direction
        """
        origin = self.origin
        if origin is None:
            origin = first
        return origin is not None and next_point == origin

    def push(self, record: PlacementRecord) -> bool:
        """Append a placement and re-evaluate completion. Returns the new flag."""
        self.is_complete = self.closes_circuit(record.next_point, first=record.position)
        self.history.append(record)
        return self.is_complete

    def pop(self) -> PlacementRecord:
        """
        Remove the newest placement and re-evaluate completion.

        Raises:
            IndexError: If the history is empty
        """
        record = self.history.pop()
        tail = self.last
        self.is_complete = tail is not None and self.closes_circuit(tail.next_point)
        return record

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        origin = self.origin
        return {
            "constructId": self.construct_id,
            "state": self.state.value,
            "isCircuitComplete": self.is_complete,
            "origin": origin.to_dict() if origin else None,
            "history": [record.to_dict() for record in self.history],
        }


@dataclass
class _LockEntry:
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    users: int = 0


class SessionStore:
    """
    Owner of every construction session, keyed by construct id.

    Attributes:
        fixed_origin: Circuit origin given to new sessions (None to derive
            it from each session's first piece)
    """

    def __init__(self, fixed_origin: TileCoords | None = None) -> None:
        self.fixed_origin = fixed_origin
        self._sessions: dict[int, Session] = {}
        self._locks: dict[int, _LockEntry] = {}

    @asynccontextmanager
    async def lock(self, construct_id: int) -> AsyncIterator[None]:
        """
        Hold the lock serializing mutations of one construct.

        The lock entry is dropped once no request holds or awaits it, so
        demolished constructs leave nothing behind.
        """
        entry = self._locks.get(construct_id)
        if entry is None:
            entry = self._locks[construct_id] = _LockEntry()
        entry.users += 1
        try:
            async with entry.lock:
                yield
        finally:
            entry.users -= 1
            if entry.users == 0:
                del self._locks[construct_id]

    @property
    def active_locks(self) -> int:
        """Number of constructs with a held or awaited lock."""
        return len(self._locks)

    def create(self, construct_id: int) -> Session:
        """Start a fresh, empty session, replacing any existing one."""
        if construct_id in self._sessions:
            logger.info(f"Replacing existing session for construct {construct_id}")
        session = Session(construct_id=construct_id, fixed_origin=self.fixed_origin)
        self._sessions[construct_id] = session
        return session

    def get(self, construct_id: int) -> Session | None:
        return self._sessions.get(construct_id)

    def get_or_create(self, construct_id: int) -> Session:
        """Get a session, creating an empty one if the construct has none."""
        session = self._sessions.get(construct_id)
        if session is None:
            logger.warning(f"No session for construct {construct_id}; creating one")
            session = self.create(construct_id)
        return session

    def discard(self, construct_id: int) -> bool:
        """
        Drop a construct's session.

        Returns:
            True if a session was removed, False if none existed
        """
        return self._sessions.pop(construct_id, None) is not None

    def clear(self) -> None:
        """Drop every session."""
        self._sessions.clear()

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, construct_id: int) -> bool:
        return construct_id in self._sessions
