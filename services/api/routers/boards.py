"""
Board upload, lookup and placement endpoints.
"""
from __future__ import annotations

from logging import getLogger
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, File, Form, HTTPException, Query, UploadFile, status
from starlette.concurrency import run_in_threadpool

from adapters.base import StorageAdapter
from core.dimensions import DimensionResolver
from core.errors import NotFound
from core.placement import place_board
from core.validation import ensure_wall_index, parse_placement_payload
from core.wall_geometry import WallGeometryModel
from models.board import BoardPlacement, PhysicalDimensions, gen_board_id
from models.converters import board_to_api
from routers.deps import get_app_settings, get_resolver, get_storage, get_wall_model, require_user_id
from schemas import BoardOut, PinRequest
from settings import Settings

logger = getLogger(__name__)
router = APIRouter(prefix="/boards", tags=["boards"])


def _load_board(storage: StorageAdapter, board_id: str) -> Dict[str, Any]:
    board = storage.get_board(board_id)
    if board is None:
        raise NotFound(f"Board {board_id} not found")
    return board


def _studio_id_for(storage: StorageAdapter, board: Dict[str, Any]) -> str:
    """Boards live in a workspace; walls belong to the workspace's studio room."""
    workspace = storage.get_workspace(board.get("workspace_id", ""))
    if workspace and workspace.get("studio_id"):
        return workspace["studio_id"]
    return board.get("workspace_id", "")


def _parse_tags(raw: Optional[str]) -> List[str]:
    if not raw:
        return []
    return [t.strip() for t in raw.split(",") if t.strip()]


@router.post("", response_model=BoardOut, status_code=status.HTTP_201_CREATED)
async def upload_board(
    file: UploadFile = File(...),
    title: str = Form(..., min_length=1, max_length=300),
    student_name: str = Form(..., alias="studentName", min_length=1, max_length=200),
    workspace_id: str = Form(..., alias="workspaceId", min_length=1),
    description: Optional[str] = Form(None),
    student_email: Optional[str] = Form(None, alias="studentEmail"),
    tags: Optional[str] = Form(None),
    image_url: Optional[str] = Form(None, alias="imageUrl"),
    owner_name: Optional[str] = Form(None, alias="ownerName"),
    owner_color: Optional[str] = Form(None, alias="ownerColor"),
    position_wall_index: Optional[int] = Form(None, alias="positionWallIndex", ge=0),
    position_x: Optional[float] = Form(None, alias="positionX", ge=0.0, le=1.0),
    position_y: Optional[float] = Form(None, alias="positionY", ge=0.0, le=1.0),
    user_id: str = Depends(require_user_id),
    storage: StorageAdapter = Depends(get_storage),
    resolver: DimensionResolver = Depends(get_resolver),
    walls: WallGeometryModel = Depends(get_wall_model),
    settings: Settings = Depends(get_app_settings),
) -> Dict[str, Any]:
    """
    Upload a board (PDF, JPEG, PNG or WebP).

    Pixel size, aspect ratio and physical size are resolved from the file
    itself. If a wall position is sent along, the board is pinned right away
    and sized from its physical dimensions.
    """
    data = await file.read()
    if len(data) > settings.max_upload_bytes:
        raise HTTPException(
            status_code=413,
            detail=f"File size exceeds {settings.max_upload_bytes // (1024 * 1024)}MB limit",
        )

    workspace = await run_in_threadpool(storage.get_workspace, workspace_id)
    if workspace is None:
        raise NotFound(f"Workspace {workspace_id} not found")

    resolved = await resolver.resolve(data, file.content_type, file.filename)

    position = None
    if position_wall_index is not None and position_x is not None and position_y is not None:
        studio_id = workspace.get("studio_id") or workspace_id
        config = await run_in_threadpool(walls.get, studio_id)
        ensure_wall_index(config, position_wall_index, studio_id)
        position = place_board(
            resolved.physical, position_wall_index, position_x, position_y, config
        ).to_storage()

    record = {
        "board_id": gen_board_id(),
        "workspace_id": workspace_id,
        "owner_id": user_id,
        "owner_name": owner_name or student_name,
        "owner_color": owner_color,
        "student_name": student_name,
        "student_email": student_email,
        "title": title,
        "description": description,
        "image_url": image_url,
        "tags": _parse_tags(tags),
        "original_width": resolved.original_width,
        "original_height": resolved.original_height,
        "aspect_ratio": resolved.aspect_ratio,
        **resolved.physical.to_storage(),
        "position": position,
    }
    created = await run_in_threadpool(storage.create_board, record)
    logger.info(
        f"✓ Board {created['board_id']} uploaded to workspace {workspace_id} "
        f"({resolved.kind.value}, {resolved.physical.physical_width:.2f}\" x {resolved.physical.physical_height:.2f}\")"
    )
    return board_to_api(created)


@router.get("", response_model=List[BoardOut])
def list_boards(
    workspace_id: Optional[str] = Query(None, alias="workspaceId"),
    owner_id: Optional[str] = Query(None, alias="ownerId"),
    storage: StorageAdapter = Depends(get_storage),
) -> List[Dict[str, Any]]:
    return [board_to_api(b) for b in storage.list_boards(workspace_id=workspace_id, owner_id=owner_id)]


@router.get("/{board_id}", response_model=BoardOut)
def get_board(board_id: str, storage: StorageAdapter = Depends(get_storage)) -> Dict[str, Any]:
    return board_to_api(_load_board(storage, board_id))


@router.delete("/{board_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_board(
    board_id: str,
    user_id: str = Depends(require_user_id),
    storage: StorageAdapter = Depends(get_storage),
) -> None:
    storage.delete_board(board_id)
    logger.info(f"Board {board_id} deleted by {user_id}")


@router.patch("/{board_id}/position", response_model=BoardOut)
def update_position(
    board_id: str,
    payload: Any = Body(...),
    user_id: str = Depends(require_user_id),
    storage: StorageAdapter = Depends(get_storage),
    walls: WallGeometryModel = Depends(get_wall_model),
) -> Dict[str, Any]:
    """
    Replace a board's placement with the given one.

    Body: { wallIndex, x, y, width?, height?, side? }. Concurrent moves of the
    same board are last-write-wins.
    """
    placement: BoardPlacement = parse_placement_payload(payload)

    board = _load_board(storage, board_id)
    studio_id = _studio_id_for(storage, board)
    ensure_wall_index(walls.get(studio_id), placement.wall_index, studio_id)

    updated = storage.update_placement(board_id, placement.to_storage())
    logger.info(
        f"📌 Board {board_id} placed on wall {placement.wall_index} at "
        f"({placement.x:.3f}, {placement.y:.3f}) by {user_id}"
    )
    return board_to_api(updated)


@router.post("/{board_id}/pin", response_model=BoardOut)
def pin_board(
    board_id: str,
    body: PinRequest,
    user_id: str = Depends(require_user_id),
    storage: StorageAdapter = Depends(get_storage),
    walls: WallGeometryModel = Depends(get_wall_model),
) -> Dict[str, Any]:
    """
    Pin a board at an anchor point and size it from its physical dimensions
    against the studio's current wall.

    Legacy boards without physical size get width = height = 0, which tells
    the client to size them from their aspect ratio.
    """
    board = _load_board(storage, board_id)
    studio_id = _studio_id_for(storage, board)
    config = walls.get(studio_id)
    ensure_wall_index(config, body.wall_index, studio_id)

    physical: Optional[PhysicalDimensions] = PhysicalDimensions.from_storage(board)
    placement = place_board(physical, body.wall_index, body.x, body.y, config, side=body.side)

    updated = storage.update_placement(board_id, placement.to_storage())
    logger.info(
        f"📌 Board {board_id} pinned to wall {placement.wall_index}: "
        f"{(placement.width or 0) * 100:.1f}% x {(placement.height or 0) * 100:.1f}% of wall by {user_id}"
    )
    return board_to_api(updated)


@router.delete("/{board_id}/position", response_model=BoardOut)
def clear_position(
    board_id: str,
    user_id: str = Depends(require_user_id),
    storage: StorageAdapter = Depends(get_storage),
) -> Dict[str, Any]:
    """Take a board off its wall."""
    updated = storage.update_placement(board_id, None)
    logger.info(f"Board {board_id} unpinned by {user_id}")
    return board_to_api(updated)
