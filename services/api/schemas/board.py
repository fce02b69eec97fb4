"""
Pydantic schemas for boards.
"""
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .placement import PlacementOut


class BoardOut(BaseModel):
    """Board as returned to clients."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str = Field(..., description="Board ID")
    workspace_id: str
    owner_id: Optional[str] = None
    owner_name: Optional[str] = None
    owner_color: Optional[str] = None
    student_name: Optional[str] = None
    student_email: Optional[str] = None
    title: str
    description: Optional[str] = None
    image_url: Optional[str] = None
    tags: List[str] = Field(default_factory=list)

    original_width: Optional[int] = Field(None, description="Display raster width in pixels")
    original_height: Optional[int] = Field(None, description="Display raster height in pixels")
    aspect_ratio: Optional[float] = None
    physical_width: Optional[float] = Field(None, description="Physical width in inches")
    physical_height: Optional[float] = Field(None, description="Physical height in inches")

    position: Optional[PlacementOut] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
