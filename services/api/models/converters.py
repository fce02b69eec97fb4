from __future__ import annotations

from typing import Any, Dict, List

from .board import BoardPlacement
from .wall import DEFAULT_WALL_CONFIG, WallConfig


def board_to_api(row: Dict[str, Any]) -> Dict[str, Any]:
    """
    Convert a storage row (snake_case) into the BoardOut field set.
    """
    placement = BoardPlacement.from_storage(row.get("position"))
    return {
        "id": row.get("board_id", ""),
        "workspace_id": row.get("workspace_id", ""),
        "owner_id": row.get("owner_id") or None,
        "owner_name": row.get("owner_name") or None,
        "owner_color": row.get("owner_color") or None,
        "student_name": row.get("student_name") or None,
        "student_email": row.get("student_email") or None,
        "title": row.get("title") or "",
        "description": row.get("description") or None,
        "image_url": row.get("image_url") or None,
        "tags": list(row.get("tags") or []),
        "original_width": row.get("original_width"),
        "original_height": row.get("original_height"),
        "aspect_ratio": row.get("aspect_ratio"),
        "physical_width": row.get("physical_width"),
        "physical_height": row.get("physical_height"),
        "position": placement.to_storage() if placement else None,
        "created_at": row.get("created_at"),
        "updated_at": row.get("updated_at"),
    }


def workspace_to_api(row: Dict[str, Any]) -> Dict[str, Any]:
    """
    Convert a storage row into the WorkspaceOut field set.
    """
    members: List[Dict[str, Any]] = [
        {
            "user_id": m.get("user_id", ""),
            "name": m.get("name") or None,
            "role": m.get("role") or "student",
            "joined_at": m.get("joined_at"),
        }
        for m in (row.get("members") or [])
    ]
    return {
        "id": row.get("workspace_id", ""),
        "name": row.get("name", ""),
        "slug": row.get("slug", ""),
        "type": row.get("type") or "class",
        "created_by": row.get("created_by") or None,
        "studio_id": row.get("studio_id") or row.get("workspace_id", ""),
        "members": members,
        "invite_code": row.get("invite_code", ""),
        "is_public": bool(row.get("is_public")),
        "published_at": row.get("published_at") or None,
        "instructor": row.get("instructor") or None,
        "semester": row.get("semester") or None,
        "network_metadata": row.get("network_metadata") or None,
        "created_at": row.get("created_at"),
    }


def wall_config_from_storage(raw: Dict[str, Any] | None) -> WallConfig:
    if not raw or not raw.get("walls"):
        return DEFAULT_WALL_CONFIG
    return WallConfig.from_dict(raw)
