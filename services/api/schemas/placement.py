"""
Pydantic schemas for board placements (wire format is camelCase).
"""
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class PlacementIn(BaseModel):
    """
    Body of PATCH /boards/{id}/position.

    wallIndex, x and y are required; their absence is caught before this
    schema runs (see core.validation.parse_placement_payload).
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    wall_index: int = Field(..., ge=0, description="Index into the studio's walls")
    x: float = Field(..., ge=0.0, le=1.0, description="Fraction of wall width from the left edge")
    y: float = Field(..., ge=0.0, le=1.0, description="Fraction of wall height from the top edge")
    width: Optional[float] = Field(None, ge=0.0, le=1.0, description="Board width as a fraction of wall width")
    height: Optional[float] = Field(None, ge=0.0, le=1.0, description="Board height as a fraction of wall height")
    side: Optional[Literal["front", "back"]] = Field(None, description="Which face of the wall")


class PlacementOut(PlacementIn):
    """Placement as returned to clients."""
    pass


class PinRequest(BaseModel):
    """
    Body of POST /boards/{id}/pin: the server sizes the board from its
    physical dimensions and the studio's current wall.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    wall_index: int = Field(..., ge=0)
    x: float = Field(..., ge=0.0, le=1.0)
    y: float = Field(..., ge=0.0, le=1.0)
    side: Optional[Literal["front", "back"]] = None


class RayHitRequest(BaseModel):
    """
    A view ray in scene space, used to find which wall (and where) a click
    landed on.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    origin: tuple[float, float, float]
    direction: tuple[float, float, float]


class RayHitOut(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    hit: bool
    wall_index: Optional[int] = None
    x: Optional[float] = None
    y: Optional[float] = None
