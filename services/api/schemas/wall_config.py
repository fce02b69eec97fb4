"""
Pydantic schemas for studio wall configuration.
"""
from typing import List, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from models.wall import DEFAULT_LAYOUT, WallConfig, WallDimensions


class WallDimensionsIn(BaseModel):
    """One wall, in feet."""
    height: float = Field(..., gt=0, description="Wall height in feet")
    width: float = Field(..., gt=0, description="Wall width in feet")


class WallConfigIn(BaseModel):
    """
    Full wall configuration for a studio. Saving replaces the previous one.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    walls: List[WallDimensionsIn] = Field(..., min_length=1, description="Walls in index order")
    layout_type: Literal["zigzag", "linear", "square", "lshape"] = Field(
        DEFAULT_LAYOUT, description="How the walls are arranged in the room"
    )

    def to_domain(self) -> WallConfig:
        return WallConfig(
            walls=tuple(WallDimensions(width=w.width, height=w.height) for w in self.walls),
            layout_type=self.layout_type,
        )

    @classmethod
    def from_domain(cls, config: WallConfig) -> "WallConfigIn":
        return cls(
            walls=[WallDimensionsIn(width=w.width, height=w.height) for w in config.walls],
            layout_type=config.layout_type,
        )


class WallConfigResponse(BaseModel):
    """
    GET /studios/{id}/wall-config. `exists` is False when the studio never
    saved a config; `config` then holds the default four-wall room.
    """
    exists: bool
    config: WallConfigIn


class WallTransformOut(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    index: int
    x: float
    z: float
    rotation_y: float
    width: float
    height: float
