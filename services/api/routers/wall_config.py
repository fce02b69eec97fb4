"""
Studio wall configuration endpoints.
"""
from logging import getLogger
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException

from core.placement import pick_wall
from core.wall_geometry import WallGeometryModel
from routers.deps import get_wall_model, require_user_id
from schemas import RayHitOut, RayHitRequest, WallConfigIn, WallConfigResponse, WallTransformOut

logger = getLogger(__name__)
router = APIRouter(prefix="/studios", tags=["walls"])


@router.get("/{studio_id}/wall-config", response_model=WallConfigResponse)
def get_wall_config(studio_id: str, walls: WallGeometryModel = Depends(get_wall_model)):
    """
    Current wall configuration. Studios that never saved one get the
    default four 8x10 ft walls with exists=false.
    """
    config, exists = walls.get_with_presence(studio_id)
    return WallConfigResponse(exists=exists, config=WallConfigIn.from_domain(config))


def _save(studio_id: str, body: WallConfigIn, walls: WallGeometryModel, user_id: str) -> Dict[str, Any]:
    try:
        saved = walls.set(studio_id, body.to_domain())
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    logger.info(f"Wall config for studio {studio_id} replaced by {user_id}")
    return {"success": True, "config": WallConfigIn.from_domain(saved)}


@router.put("/{studio_id}/wall-config")
def put_wall_config(
    studio_id: str,
    body: WallConfigIn,
    user_id: str = Depends(require_user_id),
    walls: WallGeometryModel = Depends(get_wall_model),
):
    """Replace the studio's walls in full. Pinned boards keep their fractions."""
    return _save(studio_id, body, walls, user_id)


@router.post("/{studio_id}/wall-config")
def post_wall_config(
    studio_id: str,
    body: WallConfigIn,
    user_id: str = Depends(require_user_id),
    walls: WallGeometryModel = Depends(get_wall_model),
):
    return _save(studio_id, body, walls, user_id)


@router.get("/{studio_id}/walls", response_model=List[WallTransformOut])
def list_wall_transforms(studio_id: str, walls: WallGeometryModel = Depends(get_wall_model)):
    """Scene position and yaw of every wall, in the room layout's arrangement."""
    return [
        WallTransformOut(
            index=t.index,
            x=t.x,
            z=t.z,
            rotation_y=t.rotation_y,
            width=t.width,
            height=t.height,
        )
        for t in walls.transforms(studio_id)
    ]


@router.post("/{studio_id}/hit-test", response_model=RayHitOut)
def hit_test(
    studio_id: str,
    body: RayHitRequest,
    walls: WallGeometryModel = Depends(get_wall_model),
):
    """
    Which wall a view ray lands on, and where, as top-left fractions.
    """
    hit = pick_wall(walls.transforms(studio_id), body.origin, body.direction)
    if hit is None:
        return RayHitOut(hit=False)
    wall_index, x, y = hit
    return RayHitOut(hit=True, wall_index=wall_index, x=x, y=y)
