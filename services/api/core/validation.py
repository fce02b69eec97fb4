"""
Boundary validation for PinSpace payloads.
Turns loosely-typed JSON bodies into validated domain values before they
reach the placement engine or the store.
"""
from typing import Any, Mapping

from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError

from core.errors import MissingField, NotFound
from models.board import BoardPlacement
from models.wall import WallConfig
from schemas.placement import PlacementIn

# (wire name, python name) of the fields a placement write must carry
REQUIRED_PLACEMENT_FIELDS = (
    ("wallIndex", "wall_index"),
    ("x", "x"),
    ("y", "y"),
)


def ensure_required_fields(payload: Mapping[str, Any]) -> None:
    """
    Ensure wallIndex, x and y are all present and non-null.

    Raises:
        MissingField: the first absent field, by wire name
    """
    for wire_name, py_name in REQUIRED_PLACEMENT_FIELDS:
        value = payload.get(wire_name, payload.get(py_name))
        if value is None:
            raise MissingField(wire_name)


def parse_placement_payload(payload: Any) -> BoardPlacement:
    """
    Validate a raw placement body into a BoardPlacement.

    Raises:
        MissingField: wallIndex, x or y omitted
        RequestValidationError: present but malformed (422)
    """
    if not isinstance(payload, Mapping):
        raise MissingField("wallIndex", "Placement body must be a JSON object")

    ensure_required_fields(payload)

    try:
        parsed = PlacementIn.model_validate(dict(payload))
    except ValidationError as e:
        raise RequestValidationError(e.errors())

    return BoardPlacement(
        wall_index=parsed.wall_index,
        x=parsed.x,
        y=parsed.y,
        width=parsed.width,
        height=parsed.height,
        side=parsed.side,
    )


def ensure_wall_index(config: WallConfig, wall_index: int, studio_id: str = "") -> None:
    """
    Ensure a placement targets an existing wall of the studio.

    Raises:
        NotFound: wall_index is past the last wall
    """
    if config.wall(wall_index) is None:
        where = f" in studio {studio_id}" if studio_id else ""
        raise NotFound(
            f"Wall {wall_index} not found{where} (studio has {len(config.walls)} walls)"
        )
