from .board import BoardPlacement, PhysicalDimensions
from .wall import (
    DEFAULT_WALL_CONFIG,
    LAYOUT_TYPES,
    WallConfig,
    WallDimensions,
    WallTransform,
    wall_transforms,
)

__all__ = [
    "BoardPlacement",
    "PhysicalDimensions",
    "DEFAULT_WALL_CONFIG",
    "LAYOUT_TYPES",
    "WallConfig",
    "WallDimensions",
    "WallTransform",
    "wall_transforms",
]
