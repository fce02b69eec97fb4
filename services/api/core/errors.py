"""
Error kinds raised by the PinSpace core and storage adapters.

Routers never translate these by hand: main.py registers a single exception
handler that maps each kind to an HTTP status code.
"""
from typing import Optional


class PinSpaceError(Exception):
    """Base class for every domain error."""

    status_code: int = 400
    kind: str = "error"

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class NotFound(PinSpaceError):
    """A referenced board, wall, studio or workspace does not exist."""

    status_code = 404
    kind = "not_found"


class MissingField(PinSpaceError):
    """A required field was omitted from a payload at the API boundary."""

    status_code = 400
    kind = "missing_field"

    def __init__(self, field: str, detail: Optional[str] = None):
        super().__init__(detail or f"Missing required field: {field}")
        self.field = field


class UnsupportedFileKind(PinSpaceError):
    """Uploaded file is neither a page document nor a raster image."""

    status_code = 415
    kind = "unsupported_file_kind"


class DecodeFailure(PinSpaceError):
    """Page or pixel geometry could not be read (corrupt file, timeout)."""

    status_code = 422
    kind = "decode_failure"


class Unauthorized(PinSpaceError):
    """Caller identity missing; access control itself lives upstream."""

    status_code = 401
    kind = "unauthorized"
