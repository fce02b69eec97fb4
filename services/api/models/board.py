# services/api/models/board.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional
from uuid import uuid4


def gen_board_id() -> str:
    return f"board-{uuid4().hex[:12]}"


def _safe_float(val: Any) -> Optional[float]:
    try:
        if val is None:
            return None
        s = str(val).strip()
        if not s:
            return None
        return float(s)
    except (TypeError, ValueError):
        return None


@dataclass(frozen=True)
class PhysicalDimensions:
    """
    Real-world size of a board in inches, derived once at upload time.
    """
    physical_width: float
    physical_height: float
    dpi: Optional[float] = None

    def to_storage(self) -> Dict[str, Any]:
        return {
            "physical_width": self.physical_width,
            "physical_height": self.physical_height,
            "dpi": self.dpi,
        }

    @classmethod
    def from_storage(cls, row: Dict[str, Any]) -> Optional["PhysicalDimensions"]:
        """None for legacy boards that were uploaded without physical size."""
        w = _safe_float(row.get("physical_width"))
        h = _safe_float(row.get("physical_height"))
        if w is None or h is None:
            return None
        return cls(physical_width=w, physical_height=h, dpi=_safe_float(row.get("dpi")))


@dataclass(frozen=True)
class BoardPlacement:
    """
    Where a board is pinned.

    x/y are fractional offsets (0..1) from the wall's top-left corner.
    width/height, when set, are fractions of the wall's width/height, so they
    follow whatever wall geometry is current at render time.
    """
    wall_index: int
    x: float
    y: float
    width: Optional[float] = None
    height: Optional[float] = None
    side: Optional[str] = None

    # --------------------
    # Conversions – storage layer (JSON/SQLite)
    # --------------------
    def to_storage(self) -> Dict[str, Any]:
        return {
            "wall_index": self.wall_index,
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
            "side": self.side,
        }

    @classmethod
    def from_storage(cls, row: Optional[Dict[str, Any]]) -> Optional["BoardPlacement"]:
        if not row or row.get("wall_index") is None:
            return None
        return cls(
            wall_index=int(row["wall_index"]),
            x=float(row.get("x") or 0.0),
            y=float(row.get("y") or 0.0),
            width=_safe_float(row.get("width")),
            height=_safe_float(row.get("height")),
            side=row.get("side") or None,
        )
