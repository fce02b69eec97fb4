"""
Placement engine: board physical size + anchor point -> wall-fractional placement.

Everything here sits on the interactive drag path, so the functions are total:
bad numbers collapse to a zero size or a clamped coordinate instead of raising.
"""
from __future__ import annotations

import math
from typing import Optional, Sequence, Tuple

from models.board import BoardPlacement, PhysicalDimensions
from models.wall import WallConfig, WallDimensions, WallTransform

INCHES_PER_FOOT = 12.0

Vec3 = Tuple[float, float, float]


def _positive(v: Optional[float]) -> bool:
    return v is not None and math.isfinite(v) and v > 0


def _clamp01(v: float) -> float:
    return max(0.0, min(1.0, v))


def compute_board_size(
    physical: Optional[PhysicalDimensions],
    wall: Optional[WallDimensions],
) -> Tuple[float, float]:
    """
    Size of a board as (width, height) fractions of the wall.

    A 24"x36" board on an 8x10 ft wall is 24/96 x 36/120 = (0.25, 0.3).
    Boards larger than the wall are clamped to 1.0. Returns (0.0, 0.0) when
    the physical size is unknown or unusable; the caller then sizes the board
    from its aspect ratio.
    """
    if physical is None or wall is None:
        return 0.0, 0.0
    if not (_positive(physical.physical_width) and _positive(physical.physical_height)):
        return 0.0, 0.0
    if not (_positive(wall.width) and _positive(wall.height)):
        return 0.0, 0.0

    width_pct = physical.physical_width / (wall.width * INCHES_PER_FOOT)
    height_pct = physical.physical_height / (wall.height * INCHES_PER_FOOT)
    return _clamp01(width_pct), _clamp01(height_pct)


def place_board(
    physical: Optional[PhysicalDimensions],
    wall_index: int,
    x: float,
    y: float,
    config: WallConfig,
    side: Optional[str] = None,
) -> BoardPlacement:
    """
    Pin a board to wall `wall_index` with its anchor at (x, y).

    The anchor is kept as given; a large board anchored near an edge may
    overhang the wall.
    """
    width, height = compute_board_size(physical, config.wall(wall_index))
    return BoardPlacement(
        wall_index=wall_index,
        x=x,
        y=y,
        width=width,
        height=height,
        side=side,
    )


def intersect_wall(
    transform: WallTransform,
    ray_origin: Sequence[float],
    ray_direction: Sequence[float],
) -> Optional[Vec3]:
    """
    Point where a view ray meets the (infinite) plane of a wall.

    Returns None when the ray is parallel to the wall or points away from it.
    """
    nx, ny, nz = transform.normal
    cx, cy, cz = transform.center
    ox, oy, oz = ray_origin
    dx, dy, dz = ray_direction

    denom = nx * dx + ny * dy + nz * dz
    if abs(denom) < 1e-9:
        return None
    t = (nx * (cx - ox) + ny * (cy - oy) + nz * (cz - oz)) / denom
    if t < 0:
        return None
    return (ox + t * dx, oy + t * dy, oz + t * dz)


def _to_local(transform: WallTransform, point: Sequence[float]) -> Tuple[float, float]:
    """Scene point -> wall-centred fractions, -0.5..0.5 on both axes (y up)."""
    px, py, pz = point
    cx, cy, cz = transform.center
    ox, oy, oz = px - cx, py - cy, pz - cz

    # Inverse of the wall's yaw: local x axis is (cos r, 0, -sin r)
    cos_r = math.cos(transform.rotation_y)
    sin_r = math.sin(transform.rotation_y)
    local_x = (ox * cos_r - oz * sin_r) / transform.width if transform.width > 0 else 0.0
    local_y = oy / transform.height if transform.height > 0 else 0.0
    return local_x, local_y


def hit_test_wall(transform: WallTransform, point: Sequence[float]) -> Tuple[float, float]:
    """
    Convert a scene-space point on a wall into top-left wall fractions (x, y).

    Points outside the wall rectangle are clamped onto its edge.
    """
    local_x, local_y = _to_local(transform, point)

    local_x = max(-0.5, min(0.5, local_x))
    local_y = max(-0.5, min(0.5, local_y))

    # Scene y points up; wall fractions are measured down from the top edge
    return local_x + 0.5, 0.5 - local_y


def pick_wall(
    transforms: Sequence[WallTransform],
    ray_origin: Sequence[float],
    ray_direction: Sequence[float],
) -> Optional[Tuple[int, float, float]]:
    """
    Nearest wall hit by a view ray, as (wall_index, x, y).

    Only hits that land inside a wall's rectangle count.
    """
    best: Optional[Tuple[float, int, float, float]] = None
    for t in transforms:
        hit = intersect_wall(t, ray_origin, ray_direction)
        if hit is None:
            continue
        local_x, local_y = _to_local(t, hit)
        if abs(local_x) > 0.5 or abs(local_y) > 0.5:
            continue
        dist = math.dist(ray_origin, hit)
        if best is None or dist < best[0]:
            best = (dist, t.index, local_x + 0.5, 0.5 - local_y)
    if best is None:
        return None
    return best[1], best[2], best[3]
