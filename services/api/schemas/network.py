"""
Pydantic schemas for the discovery network layout.
"""
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class StudioBubbleOut(_CamelModel):
    id: str
    name: str
    member_count: int
    x: float
    y: float
    radius: float
    instructor: Optional[str] = None
    year: Optional[str] = None
    department: Optional[str] = None


class RelationshipEdgeOut(_CamelModel):
    source: str
    target: str
    kind: Literal["instructor", "year", "department"]


class NetworkLayoutOut(_CamelModel):
    width: float
    height: float
    ticks: int
    nodes: List[StudioBubbleOut]
    edges: List[RelationshipEdgeOut]
