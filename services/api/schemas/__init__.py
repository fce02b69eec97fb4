"""
Pydantic schemas for API request/response validation.
"""
from .board import BoardOut
from .network import NetworkLayoutOut, RelationshipEdgeOut, StudioBubbleOut
from .placement import PinRequest, PlacementIn, PlacementOut, RayHitOut, RayHitRequest
from .wall_config import WallConfigIn, WallConfigResponse, WallDimensionsIn, WallTransformOut
from .workspace import (
    NetworkMetadata,
    WorkspaceCreate,
    WorkspaceJoin,
    WorkspaceMemberOut,
    WorkspaceOut,
    WorkspacePublish,
)

__all__ = [
    "BoardOut",
    "NetworkLayoutOut",
    "RelationshipEdgeOut",
    "StudioBubbleOut",
    "PinRequest",
    "PlacementIn",
    "PlacementOut",
    "RayHitOut",
    "RayHitRequest",
    "WallConfigIn",
    "WallConfigResponse",
    "WallDimensionsIn",
    "WallTransformOut",
    "NetworkMetadata",
    "WorkspaceCreate",
    "WorkspaceJoin",
    "WorkspaceMemberOut",
    "WorkspaceOut",
    "WorkspacePublish",
]
