# services/api/models/wall.py

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

# Scene units per foot used by the 3D room.
SCENE_SCALE = 0.5
WALL_DEPTH = 0.1
CORNER_OVERLAP = WALL_DEPTH / 2
LINEAR_GAP = 2.0

LAYOUT_TYPES = ("zigzag", "linear", "square", "lshape")
DEFAULT_LAYOUT = "square"


@dataclass(frozen=True)
class WallDimensions:
    """
    One physical wall, in feet.
    """
    width: float
    height: float

    def to_dict(self) -> Dict[str, float]:
        return {"height": self.height, "width": self.width}


@dataclass(frozen=True)
class WallConfig:
    """
    Ordered, index-addressed walls of one studio room plus their arrangement.
    """
    walls: Tuple[WallDimensions, ...]
    layout_type: str = DEFAULT_LAYOUT

    def validate(self) -> None:
        if not self.walls:
            raise ValueError("Wall config must contain at least one wall")
        for i, wall in enumerate(self.walls):
            if not (wall.width > 0 and wall.height > 0):
                raise ValueError(
                    f"Wall {i}: width and height must be positive, got {wall.width}x{wall.height}"
                )
        if self.layout_type not in LAYOUT_TYPES:
            raise ValueError(f"Unknown layout type: {self.layout_type}")

    def wall(self, index: int) -> Optional[WallDimensions]:
        if 0 <= index < len(self.walls):
            return self.walls[index]
        return None

    def to_dict(self) -> Dict[str, Any]:
        """JSON document shape used on the wire and in storage."""
        return {
            "walls": [w.to_dict() for w in self.walls],
            "layoutType": self.layout_type,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WallConfig":
        walls = tuple(
            WallDimensions(width=float(w["width"]), height=float(w["height"]))
            for w in (data.get("walls") or [])
        )
        layout = data.get("layoutType") or data.get("layout_type") or DEFAULT_LAYOUT
        return cls(walls=walls, layout_type=layout)


DEFAULT_WALL_CONFIG = WallConfig(
    walls=tuple(WallDimensions(width=8.0, height=10.0) for _ in range(4)),
    layout_type=DEFAULT_LAYOUT,
)


@dataclass
class WallTransform:
    """
    Where a wall sits in the 3D scene.

    (x, z) is the centre of the wall's footprint, the wall stands from y=0 to
    y=height, and rotation_y is the yaw in radians. width/height are in
    scene units (feet * SCENE_SCALE).
    """
    index: int
    x: float
    z: float
    rotation_y: float
    width: float
    height: float
    center: Tuple[float, float, float] = field(init=False)

    def __post_init__(self) -> None:
        self.center = (self.x, self.height / 2, self.z)

    @property
    def normal(self) -> Tuple[float, float, float]:
        return (-math.sin(self.rotation_y), 0.0, -math.cos(self.rotation_y))


def _zigzag(config: WallConfig, index: int) -> Tuple[float, float, float]:
    widths = [w.width * SCENE_SCALE for w in config.walls]
    width = widths[index]

    # Walk the path to this wall's start point
    cur_x = 0.0
    cur_z = 0.0
    for i in range(index):
        if i % 2 == 0:
            cur_x += widths[i] - (CORNER_OVERLAP if i > 0 else 0.0)
        else:
            cur_z += widths[i] - CORNER_OVERLAP

    if index % 2 == 0:
        x = cur_x + width / 2 - (CORNER_OVERLAP / 2 if index > 0 else 0.0)
        z = cur_z
        rot = 0.0
    else:
        x = cur_x
        z = cur_z + width / 2 - CORNER_OVERLAP / 2
        rot = math.pi / 2

    # Centre the whole path around the origin
    total_x = total_z = 0.0
    tmp_x = tmp_z = 0.0
    for i, w in enumerate(widths):
        if i % 2 == 0:
            tmp_x += w - (CORNER_OVERLAP if i > 0 else 0.0)
            total_x = max(total_x, tmp_x)
        else:
            tmp_z += w - CORNER_OVERLAP
            total_z = max(total_z, tmp_z)

    return x - total_x / 2, z - total_z / 2, rot


def _linear(config: WallConfig, index: int) -> Tuple[float, float, float]:
    spacing = config.walls[index].width * SCENE_SCALE + LINEAR_GAP
    x = index * spacing - (len(config.walls) * spacing) / 2
    return x, 0.0, 0.0


def _circular(index: int) -> Tuple[float, float, float]:
    angle = (index * math.pi) / 2
    radius = 5 + (index - 4) * 2
    return math.cos(angle) * radius, math.sin(angle) * radius, angle + math.pi / 2


def _square(config: WallConfig, index: int) -> Tuple[float, float, float]:
    widths = [w.width * SCENE_SCALE for w in config.walls]
    if index == 0:
        return 0.0, widths[0] / 2, 0.0
    if index == 1:
        return widths[0] / 2, 0.0, math.pi / 2
    if index == 2:
        return 0.0, -widths[2] / 2, math.pi
    if index == 3:
        return -widths[0] / 2, 0.0, -math.pi / 2
    return _circular(index)


def _lshape(config: WallConfig, index: int) -> Tuple[float, float, float]:
    widths = [w.width * SCENE_SCALE for w in config.walls]
    if index == 0:
        return 0.0, 0.0, 0.0
    if index == 1:
        return widths[0] / 2, -widths[1] / 2, math.pi / 2
    # Additional walls extend the long leg of the L
    return widths[0] / 2, -widths[1] - (index - 1) * widths[index], math.pi / 2


_ARRANGEMENTS = {
    "zigzag": _zigzag,
    "linear": _linear,
    "square": _square,
    "lshape": _lshape,
}


def wall_transform(config: WallConfig, index: int) -> WallTransform:
    wall = config.walls[index]
    arrange = _ARRANGEMENTS.get(config.layout_type)
    if arrange is None:
        x, z, rot = _circular(index)
    else:
        x, z, rot = arrange(config, index)
    return WallTransform(
        index=index,
        x=x,
        z=z,
        rotation_y=rot,
        width=wall.width * SCENE_SCALE,
        height=wall.height * SCENE_SCALE,
    )


def wall_transforms(config: WallConfig) -> List[WallTransform]:
    """Scene placement of every wall in the studio, in wall-index order."""
    return [wall_transform(config, i) for i in range(len(config.walls))]
