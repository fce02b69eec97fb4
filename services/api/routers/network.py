"""
Discovery network: published studios laid out as a bubble graph.
"""
from logging import getLogger
import random
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query

from adapters.base import StorageAdapter
from core.bubble_layout import BubbleLayoutEngine, StudioInfo, derive_relationship_edges
from routers.deps import get_app_settings, get_storage
from schemas import NetworkLayoutOut
from settings import Settings

logger = getLogger(__name__)
router = APIRouter(prefix="/network", tags=["network"])


def _studio_info(workspace: Dict[str, Any]) -> StudioInfo:
    meta = workspace.get("network_metadata") or {}
    return StudioInfo(
        id=workspace.get("workspace_id", ""),
        member_count=len(workspace.get("members") or []),
        name=workspace.get("name", ""),
        instructor=workspace.get("instructor"),
        year=meta.get("year"),
        department=meta.get("department"),
    )


@router.get("/studios", response_model=NetworkLayoutOut)
def get_network_layout(
    width: Optional[float] = Query(None, gt=0),
    height: Optional[float] = Query(None, gt=0),
    ticks: Optional[int] = Query(None, ge=0, le=2000),
    department: Optional[str] = Query(None),
    year: Optional[str] = Query(None),
    seed: Optional[int] = Query(None, description="Fix the jiggle RNG for a reproducible layout"),
    storage: StorageAdapter = Depends(get_storage),
    settings: Settings = Depends(get_app_settings),
):
    """
    Lay out published studios for a viewport.

    The layout is recomputed on every call and never stored; clients that
    animate run their own simulation from these starting positions.
    """
    width = width or settings.network_width
    height = height or settings.network_height
    ticks = settings.network_ticks if ticks is None else ticks

    published = [w for w in storage.list_workspaces(public_only=True) if w.get("published_at")]
    studios: List[StudioInfo] = [_studio_info(w) for w in published]
    if department:
        studios = [s for s in studios if s.department == department]
    if year:
        studios = [s for s in studios if s.year == year]

    edges = derive_relationship_edges(studios)
    engine = BubbleLayoutEngine(width, height, rng=random.Random(seed) if seed is not None else None)
    engine.set_nodes(studios, edges)
    bubbles = engine.run(ticks)

    by_id = {s.id: s for s in studios}
    nodes = [
        {
            "id": b.id,
            "name": by_id[b.id].name,
            "member_count": b.member_count,
            "x": b.x,
            "y": b.y,
            "radius": b.radius,
            "instructor": by_id[b.id].instructor,
            "year": by_id[b.id].year,
            "department": by_id[b.id].department,
        }
        for b in bubbles
    ]
    logger.info(f"🫧 Network layout: {len(nodes)} studios, {len(edges)} edges, {ticks} ticks")
    return {
        "width": width,
        "height": height,
        "ticks": ticks,
        "nodes": nodes,
        "edges": [{"source": e.source, "target": e.target, "kind": e.kind} for e in edges],
    }
