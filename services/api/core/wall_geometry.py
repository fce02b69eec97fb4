# services/api/core/wall_geometry.py
"""
Wall geometry model: studio id -> WallConfig, backed by the storage adapter.

A studio that never saved a config gets DEFAULT_WALL_CONFIG (four 8x10 ft
walls); absence is not an error. set() replaces the whole config, last write
wins.

Existing placements are NOT rescaled when walls change: board width/height
are fractions of whatever wall is current, so resizing a wall changes a
board's apparent size on screen.
"""
from __future__ import annotations

import logging
from typing import List, Tuple

from adapters.base import StorageAdapter
from core.errors import NotFound
from models.converters import wall_config_from_storage
from models.wall import (
    WallConfig,
    WallDimensions,
    WallTransform,
    wall_transforms,
)

logger = logging.getLogger(__name__)


class WallGeometryModel:
    def __init__(self, storage: StorageAdapter):
        self.storage = storage

    def get(self, studio_id: str) -> WallConfig:
        config, _ = self.get_with_presence(studio_id)
        return config

    def get_with_presence(self, studio_id: str) -> Tuple[WallConfig, bool]:
        """The studio's config and whether it was actually stored."""
        raw = self.storage.get_wall_config(studio_id)
        return wall_config_from_storage(raw), bool(raw and raw.get("walls"))

    def set(self, studio_id: str, config: WallConfig) -> WallConfig:
        """
        Replace a studio's wall config in full.

        Raises:
            ValueError: empty wall list or non-positive wall size
        """
        config.validate()
        stored = self.storage.update_wall_config(studio_id, config.to_dict())
        logger.info(
            f"🧱 Wall config saved for studio {studio_id}: "
            f"{len(config.walls)} walls, layout={config.layout_type}"
        )
        return WallConfig.from_dict(stored)

    def wall(self, studio_id: str, wall_index: int) -> WallDimensions:
        """
        Raises:
            NotFound: wall_index is not a wall of this studio
        """
        config = self.get(studio_id)
        wall = config.wall(wall_index)
        if wall is None:
            raise NotFound(
                f"Wall {wall_index} not found in studio {studio_id} ({len(config.walls)} walls)"
            )
        return wall

    def transforms(self, studio_id: str) -> List[WallTransform]:
        return wall_transforms(self.get(studio_id))
