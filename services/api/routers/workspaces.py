"""
Workspace (class studio) endpoints: create, join by invite code, publish.
"""
from __future__ import annotations

import re
import secrets
import uuid
from datetime import datetime, timezone
from logging import getLogger
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, status

from adapters.base import StorageAdapter
from core.errors import MissingField, NotFound
from models.converters import workspace_to_api
from routers.deps import get_storage, require_user_id
from schemas import WorkspaceCreate, WorkspaceJoin, WorkspaceOut, WorkspacePublish

logger = getLogger(__name__)
router = APIRouter(prefix="/workspaces", tags=["workspaces"])

# No 0/O or 1/I so codes can be read aloud in class
INVITE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
INVITE_LENGTH = 8


def generate_invite_code() -> str:
    return "".join(secrets.choice(INVITE_ALPHABET) for _ in range(INVITE_LENGTH))


def generate_slug(name: str) -> str:
    slug = re.sub(r"[^\w\s-]", "", name.lower().strip())
    slug = re.sub(r"\s+", "-", slug)
    slug = re.sub(r"-+", "-", slug)
    return slug[:50]


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _load_workspace(storage: StorageAdapter, workspace_id: str) -> Dict[str, Any]:
    workspace = storage.get_workspace(workspace_id)
    if workspace is None:
        raise NotFound(f"Workspace {workspace_id} not found")
    return workspace


@router.post("", response_model=WorkspaceOut, status_code=status.HTTP_201_CREATED)
def create_workspace(
    body: WorkspaceCreate,
    user_id: str = Depends(require_user_id),
    storage: StorageAdapter = Depends(get_storage),
):
    """
    Create a class workspace. The creator joins as its instructor and the
    workspace gets its own studio (wall room).
    """
    suffix = uuid.uuid4().hex[:12]

    # Invite codes are unique; retry the rare collision
    invite_code = generate_invite_code()
    while storage.get_workspace_by_invite(invite_code) is not None:
        invite_code = generate_invite_code()

    record = {
        "workspace_id": f"workspace-{suffix}",
        "studio_id": f"studio-{suffix}",
        "name": body.name.strip(),
        "slug": generate_slug(body.name),
        "type": "class",
        "created_by": user_id,
        "invite_code": invite_code,
        "is_public": False,
        "published_at": None,
        "instructor": body.instructor,
        "semester": body.semester,
        "network_metadata": None,
        "members": [
            {"user_id": user_id, "name": body.creator_name, "role": "instructor", "joined_at": _now()}
        ],
    }
    created = storage.create_workspace(record)
    logger.info(f"✓ Workspace {created['workspace_id']} created by {user_id} (invite {invite_code})")
    return workspace_to_api(created)


@router.get("/public", response_model=List[WorkspaceOut])
def list_public_workspaces(storage: StorageAdapter = Depends(get_storage)):
    """Workspaces published to the discovery network."""
    return [
        workspace_to_api(w)
        for w in storage.list_workspaces(public_only=True)
        if w.get("published_at")
    ]


@router.get("/by-invite/{invite_code}", response_model=WorkspaceOut)
def get_workspace_by_invite(invite_code: str, storage: StorageAdapter = Depends(get_storage)):
    workspace = storage.get_workspace_by_invite(invite_code)
    if workspace is None:
        raise NotFound("Invalid invite code")
    return workspace_to_api(workspace)


@router.post("/join", response_model=WorkspaceOut)
def join_workspace(
    body: WorkspaceJoin,
    user_id: str = Depends(require_user_id),
    storage: StorageAdapter = Depends(get_storage),
):
    """Join a workspace as a student. Joining twice is a no-op."""
    workspace = storage.get_workspace_by_invite(body.invite_code)
    if workspace is None:
        raise NotFound("Invalid invite code")

    updated = storage.add_member(
        workspace["workspace_id"],
        {"user_id": user_id, "name": body.name, "role": "student", "joined_at": _now()},
    )
    logger.info(f"User {user_id} joined workspace {workspace['workspace_id']}")
    return workspace_to_api(updated)


@router.get("/{workspace_id}", response_model=WorkspaceOut)
def get_workspace(workspace_id: str, storage: StorageAdapter = Depends(get_storage)):
    return workspace_to_api(_load_workspace(storage, workspace_id))


@router.patch("/{workspace_id}/publish", response_model=WorkspaceOut)
def publish_workspace(
    workspace_id: str,
    body: WorkspacePublish,
    user_id: str = Depends(require_user_id),
    storage: StorageAdapter = Depends(get_storage),
):
    """
    Publish a workspace to the discovery network, or take it down.

    Publishing needs networkMetadata (department and year); it decides
    which relationship edges the studio gets in the network view.
    """
    workspace = _load_workspace(storage, workspace_id)

    if body.is_public:
        if body.network_metadata is None:
            raise MissingField("networkMetadata", "Please select department and year")
        updates = {
            "is_public": True,
            "published_at": _now(),
            "network_metadata": body.network_metadata.model_dump(),
            "instructor": body.instructor or workspace.get("instructor"),
        }
    else:
        updates = {"is_public": False, "published_at": None}

    updated = storage.update_workspace(workspace_id, updates)
    state = "published" if body.is_public else "unpublished"
    logger.info(f"🌐 Workspace {workspace_id} {state} by {user_id}")
    return workspace_to_api(updated)
