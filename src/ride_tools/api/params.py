"""Parameter models for protocol endpoints.

Each endpoint validates its ``params`` object against one of these models
before doing anything. Integer fields are strict: ``"5"`` and ``5.0`` are
rejected rather than coerced, so a caller bug surfaces as
``InvalidParameters`` naming the field instead of a half-applied action.
"""

from __future__ import annotations

from typing import Any, TypeVar

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, StrictBool, StrictInt
from pydantic import ValidationError as PydanticValidationError

from ride_tools.exceptions import InvalidParametersError

ParamsT = TypeVar("ParamsT", bound=BaseModel)


class EndpointParams(BaseModel):
    """Base for endpoint parameter models."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)


class ConstructParams(EndpointParams):
    """Endpoints addressing a single construct."""

    construct_id: StrictInt = Field(alias="constructId", ge=0)


class CreateParams(EndpointParams):
    """Parameters for ``create``."""

    type_id: StrictInt = Field(validation_alias=AliasChoices("typeId", "rideType"), ge=0)
    object_id: StrictInt = Field(validation_alias=AliasChoices("objectId", "rideObject"), ge=0)
    entrance_object_id: StrictInt = Field(
        validation_alias=AliasChoices("entranceObjectId", "entranceObject"), ge=0
    )
    colour1: StrictInt = Field(ge=0)
    colour2: StrictInt = Field(ge=0)


class PlacePieceParams(EndpointParams):
    """Parameters for ``placePiece``. Coordinates are in tiles."""

    x: StrictInt = Field(ge=0)
    y: StrictInt = Field(ge=0)
    z: StrictInt = Field(ge=0)
    direction: StrictInt = Field(ge=0, le=3)
    construct_id: StrictInt = Field(alias="constructId", ge=0)
    piece_type: StrictInt = Field(alias="pieceType", ge=0)
    ride_type: StrictInt | None = Field(default=None, alias="rideType")
    brake_speed: StrictInt = Field(default=0, alias="brakeSpeed", ge=0)
    colour: StrictInt = Field(default=0, ge=0)
    seat_rotation: StrictInt = Field(default=4, alias="seatRotation", ge=0)
    track_place_flags: StrictInt = Field(default=0, alias="trackPlaceFlags", ge=0)
    is_from_track_design: StrictBool = Field(default=False, alias="isFromTrackDesign")
    chain_lift: StrictBool = Field(default=False, alias="chainLift")


def parse_params(model: type[ParamsT], params: dict[str, Any], endpoint: str | None = None) -> ParamsT:
    """
    Validate raw request params against a model.

    Args:
        model: Parameter model class
        params: The request's ``params`` object
        endpoint: Endpoint name, for error context

    Returns:
        Validated model instance

    Raises:
        InvalidParametersError: Naming the first missing or invalid field
    """
    try:
        return model.model_validate(params)
    except PydanticValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first["loc"]) or "params"
        reason = "field required" if first["type"] == "missing" else first["msg"]
        raise InvalidParametersError(field, reason, endpoint) from e
