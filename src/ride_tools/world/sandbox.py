"""In-memory sandbox world.

A deterministic stand-in for a live game instance. It stores constructs and
tile elements in dictionaries, applies actions after an optional simulated
latency, and derives next-connection points from a fixed per-piece geometry
table. It is not a physics model: every piece has a footprint and an exit
offset, nothing more.

Example:
    >>> world = SandboxWorld(map_size=64)
    >>> result = asyncio.run(
    ...     world.execute_action("ridecreate", {"rideType": 52, "rideObject": 1})
    ... )
    >>> result.data["ride"]
    0
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import asdict, dataclass, field
from typing import Any

from ride_tools.track.coords import TileCoords, WorldCoords, rotate
from ride_tools.track.pieces import PIECE_CATALOG, PieceType, is_station_piece
from ride_tools.world.base import (
    ACTION_CREATE,
    ACTION_DEMOLISH,
    ACTION_PLACE_ENTRANCE_EXIT,
    ACTION_PLACE_PIECE,
    ACTION_REMOVE_PIECE,
    ACTION_SET_STATUS,
    ELEMENT_ENTRANCE,
    ELEMENT_EXIT,
    ELEMENT_TRACK,
    STATUS_TESTING,
    ActionResult,
    ConnectivityIterator,
    ConstructInfo,
    SegmentTypeInfo,
    Tile,
    TileElement,
    World,
)

logger = logging.getLogger(__name__)

RIDE_TYPE_NAMES: dict[int, str] = {
    0: "Spiral Roller Coaster",
    1: "Stand-up Roller Coaster",
    2: "Suspended Swinging Coaster",
    3: "Inverted Roller Coaster",
    4: "Junior Roller Coaster",
    51: "Wooden Roller Coaster",
    52: "Looping Roller Coaster",
}


@dataclass(frozen=True)
class PieceGeometry:
    """Footprint and exit offset of a piece in its own frame.

    Offsets are (forward, lateral) tile pairs relative to the piece's start
    tile, with lateral +1 on the right-hand side of travel.

    Attributes:
        footprint: Tiles the piece occupies
        exit: (forward, lateral) of the next connection point
        rise: Height change in height units
        turn: Quarter turns clockwise
    """

    footprint: tuple[tuple[int, int], ...]
    exit: tuple[int, int]
    rise: int = 0
    turn: int = 0

    def to_dict(self) -> dict:
        return {
            "tiles": len(self.footprint),
            "exit": {"forward": self.exit[0], "lateral": self.exit[1]},
            "rise": self.rise,
            "turn": self.turn,
        }


def _straight(rise: int = 0) -> PieceGeometry:
    return PieceGeometry(footprint=((0, 0),), exit=(1, 0), rise=rise)


def _turn(size: int, right: bool, rise: int = 0) -> PieceGeometry:
    side = 1 if right else -1
    if size == 1:
        footprint: tuple[tuple[int, int], ...] = ((0, 0),)
        exit_ = (0, 1)
    elif size == 3:
        footprint = ((0, 0), (1, 0), (1, 1))
        exit_ = (1, 2)
    else:
        footprint = ((0, 0), (1, 0), (1, 1), (2, 1), (2, 2))
        exit_ = (2, 3)
    return PieceGeometry(
        footprint=tuple((f, lat * side) for f, lat in footprint),
        exit=(exit_[0], exit_[1] * side),
        rise=rise,
        turn=side,
    )


def _shifted(right: bool, footprint: tuple[tuple[int, int], ...], exit_: tuple[int, int]) -> PieceGeometry:
    side = 1 if right else -1
    return PieceGeometry(
        footprint=tuple((f, lat * side) for f, lat in footprint),
        exit=(exit_[0], exit_[1] * side),
    )


P = PieceType

_S_BEND = ((0, 0), (1, 0), (2, 1), (3, 1))
_LOOP = ((0, 0), (1, 0), (1, 1), (2, 1))

PIECE_GEOMETRY: dict[int, PieceGeometry] = {
    P.FLAT: _straight(),
    P.END_STATION: _straight(),
    P.BEGIN_STATION: _straight(),
    P.MIDDLE_STATION: _straight(),
    P.UP_25: _straight(2),
    P.UP_60: _straight(8),
    P.FLAT_TO_UP_25: _straight(1),
    P.UP_25_TO_UP_60: _straight(3),
    P.UP_60_TO_UP_25: _straight(3),
    P.UP_25_TO_FLAT: _straight(1),
    P.DOWN_25: _straight(-2),
    P.DOWN_60: _straight(-8),
    P.FLAT_TO_DOWN_25: _straight(-1),
    P.DOWN_25_TO_DOWN_60: _straight(-3),
    P.DOWN_60_TO_DOWN_25: _straight(-3),
    P.DOWN_25_TO_FLAT: _straight(-1),
    P.LEFT_QUARTER_TURN_5_TILES: _turn(5, right=False),
    P.RIGHT_QUARTER_TURN_5_TILES: _turn(5, right=True),
    P.FLAT_TO_LEFT_BANK: _straight(),
    P.FLAT_TO_RIGHT_BANK: _straight(),
    P.LEFT_BANK_TO_FLAT: _straight(),
    P.RIGHT_BANK_TO_FLAT: _straight(),
    P.BANKED_LEFT_QUARTER_TURN_5_TILES: _turn(5, right=False),
    P.BANKED_RIGHT_QUARTER_TURN_5_TILES: _turn(5, right=True),
    P.LEFT_BANK_TO_UP_25: _straight(1),
    P.RIGHT_BANK_TO_UP_25: _straight(1),
    P.UP_25_TO_LEFT_BANK: _straight(1),
    P.UP_25_TO_RIGHT_BANK: _straight(1),
    P.LEFT_BANK_TO_DOWN_25: _straight(-1),
    P.RIGHT_BANK_TO_DOWN_25: _straight(-1),
    P.DOWN_25_TO_LEFT_BANK: _straight(-1),
    P.DOWN_25_TO_RIGHT_BANK: _straight(-1),
    P.LEFT_BANK: _straight(),
    P.RIGHT_BANK: _straight(),
    P.LEFT_QUARTER_TURN_5_TILES_UP_25: _turn(5, right=False, rise=8),
    P.RIGHT_QUARTER_TURN_5_TILES_UP_25: _turn(5, right=True, rise=8),
    P.LEFT_QUARTER_TURN_5_TILES_DOWN_25: _turn(5, right=False, rise=-8),
    P.RIGHT_QUARTER_TURN_5_TILES_DOWN_25: _turn(5, right=True, rise=-8),
    P.S_BEND_LEFT: _shifted(False, _S_BEND, (4, 1)),
    P.S_BEND_RIGHT: _shifted(True, _S_BEND, (4, 1)),
    P.LEFT_VERTICAL_LOOP: _shifted(False, _LOOP, (3, 1)),
    P.RIGHT_VERTICAL_LOOP: _shifted(True, _LOOP, (3, 1)),
    P.LEFT_QUARTER_TURN_3_TILES: _turn(3, right=False),
    P.RIGHT_QUARTER_TURN_3_TILES: _turn(3, right=True),
    P.LEFT_BANKED_QUARTER_TURN_3_TILES: _turn(3, right=False),
    P.RIGHT_BANKED_QUARTER_TURN_3_TILES: _turn(3, right=True),
    P.LEFT_QUARTER_TURN_3_TILES_UP_25: _turn(3, right=False, rise=4),
    P.RIGHT_QUARTER_TURN_3_TILES_UP_25: _turn(3, right=True, rise=4),
    P.LEFT_QUARTER_TURN_3_TILES_DOWN_25: _turn(3, right=False, rise=-4),
    P.RIGHT_QUARTER_TURN_3_TILES_DOWN_25: _turn(3, right=True, rise=-4),
    P.LEFT_QUARTER_TURN_1_TILE: _turn(1, right=False),
    P.RIGHT_QUARTER_TURN_1_TILE: _turn(1, right=True),
}


def local_to_tile(origin: TileCoords, forward: int, lateral: int) -> tuple[int, int]:
    """Map a (forward, lateral) offset in a piece's frame to tile x/y."""
    moved = origin.step(origin.direction, forward).step(rotate(origin.direction, 1), lateral)
    return moved.x, moved.y


@dataclass
class _Construct:
    info: ConstructInfo
    ride_object: int
    entrance_object: int
    colour1: int
    colour2: int
    pieces: list[int] = field(default_factory=list)


@dataclass
class _PlacedPiece:
    construct_id: int
    piece_type: int
    origin: TileCoords
    tiles: list[tuple[int, int]]
    next_position: WorldCoords


class SandboxIterator(ConnectivityIterator):
    """Connectivity iterator over the sandbox's placed pieces."""

    def __init__(self, world: SandboxWorld, piece_key: int) -> None:
        self._world = world
        self._key: int | None = piece_key

    @property
    def next_position(self) -> WorldCoords | None:
        piece = self._world._pieces.get(self._key) if self._key is not None else None
        return piece.next_position if piece else None

    def advance(self) -> bool:
        position = self.next_position
        if position is None:
            return False
        piece = self._world._pieces[self._key]
        for key, other in self._world._pieces.items():
            if (
                other.construct_id == piece.construct_id
                and other.origin.to_world() == position
            ):
                self._key = key
                return True
        return False


class SandboxWorld(World):
    """
    In-memory world with deterministic track geometry.

    Attributes:
        latency: Seconds each action waits before applying, to exercise
            the asynchronous paths of callers.
    """

    def __init__(self, map_size: int = 256, latency: float = 0.0) -> None:
        self._map_size = map_size
        self.latency = latency
        self._constructs: dict[int, _Construct] = {}
        self._pieces: dict[int, _PlacedPiece] = {}
        # (x, y) -> [(element, piece key or None)]
        self._tiles: dict[tuple[int, int], list[tuple[TileElement, int | None]]] = {}
        self._next_construct_id = 0
        self._next_piece_key = 0

    @property
    def map_size(self) -> int:
        return self._map_size

    # -----------------------------------------------------------------
    # Queries
    # -----------------------------------------------------------------

    def find_all_constructs(self) -> list[ConstructInfo]:
        return [c.info for c in self._constructs.values()]

    def find_construct(self, construct_id: int) -> ConstructInfo | None:
        construct = self._constructs.get(construct_id)
        return construct.info if construct else None

    def dump_construct(self, construct_id: int) -> dict[str, Any] | None:
        construct = self._constructs.get(construct_id)
        if construct is None:
            return None
        dump = asdict(construct.info)
        dump.update(
            {
                "rideObject": construct.ride_object,
                "entranceObject": construct.entrance_object,
                "colour1": construct.colour1,
                "colour2": construct.colour2,
                "pieceCount": len(construct.pieces),
            }
        )
        return dump

    def list_all_segment_types(self) -> list[SegmentTypeInfo]:
        return [
            SegmentTypeInfo(
                type=int(piece),
                description=info.description,
                group=info.group,
                length=len(PIECE_GEOMETRY[piece].footprint),
                geometry=PIECE_GEOMETRY[piece].to_dict(),
            )
            for piece, info in PIECE_CATALOG.items()
        ]

    def get_tile(self, x: int, y: int) -> Tile | None:
        if not self._on_map(x, y):
            return None
        entries = self._tiles.get((x, y), [])
        return Tile(x=x, y=y, elements=[element for element, _ in entries])

    def get_connectivity_iterator(
        self, position: WorldCoords, element_index: int
    ) -> ConnectivityIterator | None:
        tile = position.to_tile()
        entries = self._tiles.get((tile.x, tile.y), [])
        if not 0 <= element_index < len(entries):
            return None
        element, key = entries[element_index]
        if element.type != ELEMENT_TRACK or key is None:
            return None
        return SandboxIterator(self, key)

    # -----------------------------------------------------------------
    # Actions
    # -----------------------------------------------------------------

    async def execute_action(self, name: str, args: dict[str, Any]) -> ActionResult | None:
        if self.latency:
            await asyncio.sleep(self.latency)

        handler = self._actions.get(name)
        if handler is None:
            return ActionResult(error=f"Unknown action: {name}")

        logger.debug(f"Sandbox action {name}: {args}")
        return handler(self, args)

    def _create(self, args: dict[str, Any]) -> ActionResult:
        ride_type = int(args.get("rideType", 0))
        ride_object = int(args.get("rideObject", -1))
        if ride_object < 0:
            return ActionResult(error="Invalid ride object")

        construct_id = self._next_construct_id
        self._next_construct_id += 1
        name = f"{RIDE_TYPE_NAMES.get(ride_type, 'Ride')} {construct_id + 1}"
        self._constructs[construct_id] = _Construct(
            info=ConstructInfo(id=construct_id, name=name, type=ride_type),
            ride_object=ride_object,
            entrance_object=int(args.get("entranceObject", 0)),
            colour1=int(args.get("colour1", 0)),
            colour2=int(args.get("colour2", 0)),
        )
        return ActionResult(data={"ride": construct_id})

    def _demolish(self, args: dict[str, Any]) -> ActionResult:
        construct_id = args.get("ride")
        if construct_id not in self._constructs:
            return ActionResult(error="Invalid ride")

        del self._constructs[construct_id]
        self._pieces = {k: p for k, p in self._pieces.items() if p.construct_id != construct_id}
        for key in list(self._tiles):
            remaining = [e for e in self._tiles[key] if e[0].construct_id != construct_id]
            if remaining:
                self._tiles[key] = remaining
            else:
                del self._tiles[key]
        return ActionResult()

    def _set_status(self, args: dict[str, Any]) -> ActionResult:
        construct = self._constructs.get(args.get("ride"))
        if construct is None:
            return ActionResult(error="Invalid ride")

        status = int(args.get("status", 0))
        if status == STATUS_TESTING:
            if not construct.pieces:
                return ActionResult(error="Ride has no track")
            self._rate(construct)
        construct.info.status = status
        return ActionResult()

    def _rate(self, construct: _Construct) -> None:
        pieces = [self._pieces[k] for k in construct.pieces]
        turns = sum(1 for p in pieces if PIECE_GEOMETRY[p.piece_type].turn)
        drops = sum(1 for p in pieces if PIECE_GEOMETRY[p.piece_type].rise < 0)
        construct.info.excitement = min(100 + 25 * drops + 10 * turns, 999)
        construct.info.intensity = min(50 + 30 * drops + 15 * turns, 999)
        construct.info.nausea = min(20 + 10 * turns, 999)

    def _place_piece(self, args: dict[str, Any]) -> ActionResult:
        construct = self._constructs.get(args.get("ride"))
        if construct is None:
            return ActionResult(error="Invalid ride")

        piece_type = args.get("trackType")
        geometry = PIECE_GEOMETRY.get(piece_type)
        if geometry is None:
            return ActionResult(error=f"Invalid track type: {piece_type}")

        origin = WorldCoords(
            x=int(args["x"]), y=int(args["y"]), z=int(args["z"]), direction=int(args["direction"])
        ).to_tile()
        if origin.z < 0:
            return ActionResult(error="Too low!")

        tiles = [local_to_tile(origin, f, lat) for f, lat in geometry.footprint]
        for x, y in tiles:
            if not self._on_map(x, y):
                return ActionResult(error="Off edge of map!")
            for element, _ in self._tiles.get((x, y), []):
                if abs(element.base_height - origin.z) < 2:
                    return ActionResult(error="There's already something there")

        exit_x, exit_y = local_to_tile(origin, *geometry.exit)
        next_tile = TileCoords(
            exit_x, exit_y, origin.z + geometry.rise, rotate(origin.direction, geometry.turn)
        )

        key = self._next_piece_key
        self._next_piece_key += 1
        self._pieces[key] = _PlacedPiece(
            construct_id=construct.info.id,
            piece_type=piece_type,
            origin=origin,
            tiles=tiles,
            next_position=next_tile.to_world(),
        )
        construct.pieces.append(key)

        for sequence, (x, y) in enumerate(tiles):
            element = TileElement(
                type=ELEMENT_TRACK,
                construct_id=construct.info.id,
                base_height=origin.z,
                piece_type=piece_type,
                direction=origin.direction,
                sequence=sequence,
            )
            self._tiles.setdefault((x, y), []).append((element, key))

        return ActionResult(data={"position": origin.to_world().to_dict()})

    def _remove_piece(self, args: dict[str, Any]) -> ActionResult:
        tile = WorldCoords(x=int(args["x"]), y=int(args["y"]), z=int(args.get("z", 0))).to_tile()
        entries = self._tiles.get((tile.x, tile.y), [])
        index = int(args.get("elementIndex", -1))
        if not 0 <= index < len(entries):
            return ActionResult(error="Track element not found")

        element, key = entries[index]
        if element.type != ELEMENT_TRACK or key is None:
            return ActionResult(error="Element is not track")
        if element.piece_type != args.get("trackType"):
            return ActionResult(error="Track type mismatch")
        if int(args.get("sequence", element.sequence)) != element.sequence:
            return ActionResult(error="Track sequence mismatch")

        piece = self._pieces.pop(key)
        self._constructs[piece.construct_id].pieces.remove(key)
        for x, y in piece.tiles:
            remaining = [e for e in self._tiles.get((x, y), []) if e[1] != key]
            if remaining:
                self._tiles[(x, y)] = remaining
            else:
                self._tiles.pop((x, y), None)
        return ActionResult()

    def _place_entrance_exit(self, args: dict[str, Any]) -> ActionResult:
        construct = self._constructs.get(args.get("ride"))
        if construct is None:
            return ActionResult(error="Invalid ride")

        tile = WorldCoords(x=int(args["x"]), y=int(args["y"]), z=0).to_tile()
        if not self._on_map(tile.x, tile.y):
            return ActionResult(error="Off edge of map!")
        if self._tiles.get((tile.x, tile.y)):
            return ActionResult(error="Tile occupied")

        stations = [
            self._pieces[k] for k in construct.pieces if is_station_piece(self._pieces[k].piece_type)
        ]
        height = stations[0].origin.z if stations else 0
        is_exit = bool(args.get("isExit"))
        element = TileElement(
            type=ELEMENT_EXIT if is_exit else ELEMENT_ENTRANCE,
            construct_id=construct.info.id,
            base_height=height,
            direction=int(args.get("direction", 0)),
        )
        self._tiles.setdefault((tile.x, tile.y), []).append((element, None))
        return ActionResult(data={"x": tile.x, "y": tile.y, "isExit": is_exit})

    _actions = {
        ACTION_CREATE: _create,
        ACTION_DEMOLISH: _demolish,
        ACTION_SET_STATUS: _set_status,
        ACTION_PLACE_PIECE: _place_piece,
        ACTION_REMOVE_PIECE: _remove_piece,
        ACTION_PLACE_ENTRANCE_EXIT: _place_entrance_exit,
    }

    def _on_map(self, x: int, y: int) -> bool:
        return 0 <= x < self._map_size and 0 <= y < self._map_size
