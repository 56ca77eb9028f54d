"""Tile-space and world-space coordinates.

Callers address the map in tiles and height units; the world addresses it
in world units. One tile is 32 world units wide, one height unit is 8 world
units tall.
"""

from __future__ import annotations

from dataclasses import dataclass

TILE_SIZE = 32
HEIGHT_STEP = 8

# (dx, dy) per direction, in tiles
DIRECTION_DELTAS: tuple[tuple[int, int], ...] = ((1, 0), (0, 1), (-1, 0), (0, -1))


@dataclass(frozen=True)
class TileCoords:
    """A position in tile space.

    Attributes:
        x: Tile column
        y: Tile row
        z: Height in height units
        direction: Facing, 0-3
    """

    x: int
    y: int
    z: int
    direction: int = 0

    def to_world(self) -> WorldCoords:
        """Convert to world coordinates."""
        return WorldCoords(
            x=self.x * TILE_SIZE,
            y=self.y * TILE_SIZE,
            z=self.z * HEIGHT_STEP,
            direction=self.direction,
        )

    def step(self, direction: int, tiles: int = 1) -> TileCoords:
        """Return the position ``tiles`` tiles away along ``direction``."""
        dx, dy = DIRECTION_DELTAS[direction % 4]
        return TileCoords(self.x + dx * tiles, self.y + dy * tiles, self.z, self.direction)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {"x": self.x, "y": self.y, "z": self.z, "direction": self.direction}


@dataclass(frozen=True)
class WorldCoords:
    """A position in world space."""

    x: int
    y: int
    z: int
    direction: int = 0

    def to_tile(self) -> TileCoords:
        """Convert to tile coordinates, rounding x/y to the nearest tile."""
        return TileCoords(
            x=_nearest(self.x, TILE_SIZE),
            y=_nearest(self.y, TILE_SIZE),
            z=self.z // HEIGHT_STEP,
            direction=self.direction,
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {"x": self.x, "y": self.y, "z": self.z, "direction": self.direction}


def _nearest(value: int, unit: int) -> int:
    # Integer division keeps arbitrarily large coordinates exact
    return (value + unit // 2) // unit


def rotate(direction: int, quarter_turns: int) -> int:
    """Rotate a direction clockwise by a number of quarter turns."""
    return (direction + quarter_turns) % 4


def opposite(direction: int) -> int:
    """Return the reverse direction."""
    return (direction + 2) % 4
