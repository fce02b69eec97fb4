"""
Shared FastAPI dependencies: services live on app.state, built in main.py.
"""
from typing import Optional

from fastapi import Header, HTTPException, Request

from adapters.base import StorageAdapter
from core.dimensions import DimensionResolver
from core.errors import Unauthorized
from core.wall_geometry import WallGeometryModel
from settings import Settings


def get_storage(request: Request) -> StorageAdapter:
    """Dependency to get storage adapter from app state."""
    adapter = getattr(request.app.state, "storage_adapter", None)
    if adapter is None:
        raise HTTPException(status_code=500, detail="Storage adapter not configured")
    return adapter


def get_wall_model(request: Request) -> WallGeometryModel:
    return WallGeometryModel(get_storage(request))


def get_resolver(request: Request) -> DimensionResolver:
    resolver = getattr(request.app.state, "dimension_resolver", None)
    if resolver is None:
        raise HTTPException(status_code=500, detail="Dimension resolver not configured")
    return resolver


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def require_user_id(x_user_id: Optional[str] = Header(None)) -> str:
    """
    Caller identity as forwarded by the auth layer in front of this service.
    Membership/ownership checks happen there; we only need to know who it is.
    """
    user_id = (x_user_id or "").strip()
    if not user_id:
        raise Unauthorized("Missing X-User-Id header")
    return user_id
