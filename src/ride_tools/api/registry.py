"""Unified endpoint registry.

Single source of truth for the protocol's endpoints: the dispatcher looks
handlers up here and ``listEndpoints`` describes them from the same table.

Example:
    >>> from ride_tools.api.registry import get_endpoint
    >>> spec = get_endpoint("getValidNextPieces")
    >>> payload = await spec.handler(ctx, {"constructId": 0})
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from ride_tools.api.context import ServerContext
from ride_tools.api.params import ConstructParams, CreateParams, PlacePieceParams, parse_params

Handler = Callable[[ServerContext, dict[str, Any]], Awaitable[Any]]


@dataclass
class EndpointSpec:
    """Specification for a protocol endpoint.

    Attributes:
        name: Endpoint name as sent in requests
        description: Human-readable description
        parameters: JSON Schema describing ``params``
        handler: Coroutine function ``(ctx, params) -> payload``
        category: Category for grouping endpoints
    """

    name: str
    description: str
    parameters: dict[str, Any]
    handler: Handler
    category: str = "general"

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "parameters": self.parameters,
            "category": self.category,
        }


# Global endpoint registry
ENDPOINT_REGISTRY: dict[str, EndpointSpec] = {}


def register_endpoint(
    name: str,
    description: str,
    parameters: dict[str, Any],
    handler: Handler,
    category: str = "general",
) -> EndpointSpec:
    """Register an endpoint in the global registry.

    Args:
        name: Endpoint name
        description: Human-readable description
        parameters: JSON Schema for ``params``
        handler: Coroutine function that executes the endpoint
        category: Optional category for grouping

    Returns:
        The registered EndpointSpec

    Raises:
        ValueError: If an endpoint with the same name is already registered
    """
    if name in ENDPOINT_REGISTRY:
        raise ValueError(f"Endpoint already registered: {name}")

    spec = EndpointSpec(
        name=name,
        description=description,
        parameters=parameters,
        handler=handler,
        category=category,
    )
    ENDPOINT_REGISTRY[name] = spec
    return spec


def get_endpoint(name: str) -> EndpointSpec | None:
    """Get an endpoint specification by name, or None if not registered."""
    return ENDPOINT_REGISTRY.get(name)


def list_endpoints(category: str | None = None) -> list[EndpointSpec]:
    """List registered endpoints, optionally filtered by category."""
    if category is None:
        return list(ENDPOINT_REGISTRY.values())
    return [e for e in ENDPOINT_REGISTRY.values() if e.category == category]


def clear_registry() -> None:
    """Clear all registered endpoints (for testing)."""
    ENDPOINT_REGISTRY.clear()


# =============================================================================
# Endpoint Definitions
# =============================================================================


def _make_params(
    properties: dict[str, Any] | None = None,
    required: list[str] | None = None,
) -> dict[str, Any]:
    """Create a JSON Schema object for endpoint parameters."""
    return {
        "type": "object",
        "properties": properties or {},
        "required": required or [],
    }


_CONSTRUCT_ID = {
    "constructId": {
        "type": "integer",
        "description": "Id of the construct",
        "minimum": 0,
    }
}


def _construct_id(params: dict[str, Any], endpoint: str) -> int:
    return parse_params(ConstructParams, params, endpoint).construct_id


# -----------------------------------------------------------------------------
# Construct Endpoints
# -----------------------------------------------------------------------------


async def _handler_list_all(ctx: ServerContext, params: dict[str, Any]) -> list[dict[str, Any]]:
    """Handle listAll."""
    from ride_tools.api.tools.constructs import list_all

    return [summary.to_dict() for summary in list_all(ctx)]


register_endpoint(
    name="listAll",
    description="List every construct in the world with its id, name and type.",
    parameters=_make_params(),
    handler=_handler_list_all,
    category="constructs",
)


async def _handler_list_all_segments(
    ctx: ServerContext, params: dict[str, Any]
) -> list[dict[str, Any]]:
    """Handle listAllSegments."""
    from ride_tools.api.tools.constructs import list_all_segments

    return list_all_segments(ctx)


register_endpoint(
    name="listAllSegments",
    description=(
        "List every track piece type the world can place, with its description, "
        "group, length in tiles and geometry."
    ),
    parameters=_make_params(),
    handler=_handler_list_all_segments,
    category="constructs",
)


async def _handler_create(ctx: ServerContext, params: dict[str, Any]) -> dict[str, Any]:
    """Handle create."""
    from ride_tools.api.tools.constructs import create_construct

    args = parse_params(CreateParams, params, "create")
    construct_id = await create_construct(
        ctx,
        type_id=args.type_id,
        object_id=args.object_id,
        entrance_object_id=args.entrance_object_id,
        colour1=args.colour1,
        colour2=args.colour2,
    )
    return {"constructId": construct_id}


register_endpoint(
    name="create",
    description=(
        "Create a construct and start an empty construction session for it. "
        "rideType, rideObject and entranceObject are accepted as aliases."
    ),
    parameters=_make_params(
        properties={
            "typeId": {"type": "integer", "description": "Ride type id", "minimum": 0},
            "objectId": {"type": "integer", "description": "Ride object id", "minimum": 0},
            "entranceObjectId": {
                "type": "integer",
                "description": "Entrance style object id",
                "minimum": 0,
            },
            "colour1": {"type": "integer", "description": "Primary colour", "minimum": 0},
            "colour2": {"type": "integer", "description": "Secondary colour", "minimum": 0},
        },
        required=["typeId", "objectId", "entranceObjectId", "colour1", "colour2"],
    ),
    handler=_handler_create,
    category="constructs",
)


async def _handler_start_test(ctx: ServerContext, params: dict[str, Any]) -> dict[str, Any]:
    """Handle startTest."""
    from ride_tools.api.tools.constructs import start_test

    message = await start_test(ctx, _construct_id(params, "startTest"))
    return {"message": message}


register_endpoint(
    name="startTest",
    description="Put a construct into test-run mode so its ratings are computed.",
    parameters=_make_params(properties=_CONSTRUCT_ID, required=["constructId"]),
    handler=_handler_start_test,
    category="constructs",
)


async def _handler_get_stats(ctx: ServerContext, params: dict[str, Any]) -> dict[str, Any]:
    """Handle getStats."""
    from ride_tools.api.tools.constructs import get_stats

    return get_stats(ctx, _construct_id(params, "getStats")).to_dict()


register_endpoint(
    name="getStats",
    description=(
        "Get a construct's excitement, intensity and nausea ratings. Ratings not "
        "yet computed are null."
    ),
    parameters=_make_params(properties=_CONSTRUCT_ID, required=["constructId"]),
    handler=_handler_get_stats,
    category="constructs",
)


async def _handler_dump_construct(ctx: ServerContext, params: dict[str, Any]) -> dict[str, Any]:
    """Handle dumpConstruct."""
    from ride_tools.api.tools.constructs import dump_construct

    return dump_construct(ctx, _construct_id(params, "dumpConstruct"))


register_endpoint(
    name="dumpConstruct",
    description="Return every field the world exposes for a construct.",
    parameters=_make_params(properties=_CONSTRUCT_ID, required=["constructId"]),
    handler=_handler_dump_construct,
    category="constructs",
)


async def _handler_demolish(ctx: ServerContext, params: dict[str, Any]) -> dict[str, Any]:
    """Handle demolish."""
    from ride_tools.api.tools.constructs import demolish

    message = await demolish(ctx, _construct_id(params, "demolish"))
    return {"message": message}


register_endpoint(
    name="demolish",
    description="Demolish one construct and discard its construction session.",
    parameters=_make_params(properties=_CONSTRUCT_ID, required=["constructId"]),
    handler=_handler_demolish,
    category="constructs",
)


async def _handler_delete_all(ctx: ServerContext, params: dict[str, Any]) -> dict[str, Any]:
    """Handle deleteAll."""
    from ride_tools.api.tools.constructs import delete_all

    result = await delete_all(ctx)
    return result.to_dict()


register_endpoint(
    name="deleteAll",
    description=(
        "Demolish every construct, one after another, and discard their sessions. "
        "Succeeds with an informational message when there is nothing to demolish."
    ),
    parameters=_make_params(),
    handler=_handler_delete_all,
    category="constructs",
)


# -----------------------------------------------------------------------------
# Track Endpoints
# -----------------------------------------------------------------------------


async def _handler_place_piece(ctx: ServerContext, params: dict[str, Any]) -> dict[str, Any]:
    """Handle placePiece."""
    from ride_tools.api.tools.placement import place_piece

    args = parse_params(PlacePieceParams, params, "placePiece")
    result = await place_piece(ctx, args)
    return result.to_dict()


register_endpoint(
    name="placePiece",
    description=(
        "Place one track piece at tile coordinates. Returns where the next piece "
        "must go and whether the circuit is now closed."
    ),
    parameters=_make_params(
        properties={
            "x": {"type": "integer", "description": "Tile column", "minimum": 0},
            "y": {"type": "integer", "description": "Tile row", "minimum": 0},
            "z": {"type": "integer", "description": "Height in height units", "minimum": 0},
            "direction": {
                "type": "integer",
                "description": "Facing: 0=+x, 1=+y, 2=-x, 3=-y",
                "minimum": 0,
                "maximum": 3,
            },
            **_CONSTRUCT_ID,
            "pieceType": {"type": "integer", "description": "Track piece id", "minimum": 0},
            "brakeSpeed": {"type": "integer", "default": 0},
            "colour": {"type": "integer", "default": 0},
            "seatRotation": {"type": "integer", "default": 4},
            "trackPlaceFlags": {"type": "integer", "default": 0},
            "isFromTrackDesign": {"type": "boolean", "default": False},
            "chainLift": {
                "type": "boolean",
                "description": "Add a chain lift to the piece",
                "default": False,
            },
        },
        required=["x", "y", "z", "direction", "constructId", "pieceType"],
    ),
    handler=_handler_place_piece,
    category="track",
)


async def _handler_get_valid_next_pieces(
    ctx: ServerContext, params: dict[str, Any]
) -> dict[str, Any]:
    """Handle getValidNextPieces."""
    from ride_tools.api.tools.placement import get_valid_next_pieces

    return get_valid_next_pieces(ctx, _construct_id(params, "getValidNextPieces")).to_dict()


register_endpoint(
    name="getValidNextPieces",
    description=(
        "List the piece ids that may legally follow the construct's last placed "
        "piece, with the last piece's exit state and the next position."
    ),
    parameters=_make_params(properties=_CONSTRUCT_ID, required=["constructId"]),
    handler=_handler_get_valid_next_pieces,
    category="track",
)


async def _handler_place_entrance_exit(
    ctx: ServerContext, params: dict[str, Any]
) -> dict[str, Any]:
    """Handle placeEntranceExit."""
    from ride_tools.api.tools.entrance import place_entrance_exit

    result = await place_entrance_exit(ctx, _construct_id(params, "placeEntranceExit"))
    return result.to_dict()


register_endpoint(
    name="placeEntranceExit",
    description=(
        "Place the construct's entrance and exit on either side of its first "
        "station piece."
    ),
    parameters=_make_params(properties=_CONSTRUCT_ID, required=["constructId"]),
    handler=_handler_place_entrance_exit,
    category="track",
)


async def _handler_delete_last_piece(ctx: ServerContext, params: dict[str, Any]) -> dict[str, Any]:
    """Handle deleteLastPiece."""
    from ride_tools.api.tools.placement import delete_last_piece

    result = await delete_last_piece(ctx, _construct_id(params, "deleteLastPiece"))
    return result.to_dict()


register_endpoint(
    name="deleteLastPiece",
    description="Remove the most recently placed piece of a construct.",
    parameters=_make_params(properties=_CONSTRUCT_ID, required=["constructId"]),
    handler=_handler_delete_last_piece,
    category="track",
)


async def _handler_get_session(ctx: ServerContext, params: dict[str, Any]) -> dict[str, Any]:
    """Handle getSession."""
    from ride_tools.api.tools.placement import get_session

    return get_session(ctx, _construct_id(params, "getSession"))


register_endpoint(
    name="getSession",
    description="Describe a construct's construction session and placement history.",
    parameters=_make_params(properties=_CONSTRUCT_ID, required=["constructId"]),
    handler=_handler_get_session,
    category="track",
)


# -----------------------------------------------------------------------------
# Discovery
# -----------------------------------------------------------------------------


async def _handler_list_endpoints(
    ctx: ServerContext, params: dict[str, Any]
) -> list[dict[str, Any]]:
    """Handle listEndpoints."""
    return [spec.to_dict() for spec in list_endpoints()]


register_endpoint(
    name="listEndpoints",
    description="List every endpoint the server accepts, with its parameter schema.",
    parameters=_make_params(),
    handler=_handler_list_endpoints,
    category="discovery",
)
