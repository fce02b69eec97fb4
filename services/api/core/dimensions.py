# services/api/core/dimensions.py
"""
Dimension resolver: uploaded file -> physical board size in inches.

- Page documents (PDF): first page size in points / 72.
- Raster images: pixel size / assumed DPI. DPI is inferred from size, not read
  from metadata: anything over 2000 px on either side is treated as a 300 DPI
  print/scan, everything else as a 72 DPI screen image.

Decoding goes through a GeometryReader that main.py constructs at startup and
closes at shutdown; the resolver never opens its own decoder.
"""
from __future__ import annotations

import asyncio
import hashlib
import io
import logging
import threading
import warnings
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

import pypdfium2 as pdfium
from cachetools import LRUCache
from PIL import Image, UnidentifiedImageError

from core.errors import DecodeFailure, UnsupportedFileKind
from models.board import PhysicalDimensions

logger = logging.getLogger(__name__)

POINTS_PER_INCH = 72.0
SCREEN_DPI = 72
PRINT_DPI = 300
PRINT_PIXEL_THRESHOLD = 2000

# PDFs are rasterised for display at 1.5x, capped at 2000 px on the long side
PDF_RENDER_SCALE = 1.5
PDF_RENDER_MAX_PX = 2000

# Only image headers are read, so large scans are cheap; this caps nonsense sizes
DEFAULT_MAX_IMAGE_PIXELS = 2_000_000_000

# Pillow keeps its bomb limit in a module global
_PILLOW_LIMIT_LOCK = threading.Lock()

PDF_CONTENT_TYPES = {"application/pdf"}
IMAGE_CONTENT_TYPES = {"image/jpeg", "image/jpg", "image/png", "image/webp"}
PDF_EXTENSIONS = {".pdf"}
IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".webp"}


class FileKind(str, Enum):
    DOCUMENT = "document"
    IMAGE = "image"


@dataclass(frozen=True)
class SourceGeometry:
    """
    Intrinsic geometry of a source file.

    For documents width/height are first-page points, for images pixels.
    """
    kind: FileKind
    width: float
    height: float


@dataclass(frozen=True)
class ResolvedDimensions:
    """Everything the upload path stores about a board's size."""
    kind: FileKind
    physical: PhysicalDimensions
    original_width: int
    original_height: int

    @property
    def aspect_ratio(self) -> float:
        if self.original_height <= 0:
            return 0.0
        return self.original_width / self.original_height


def detect_file_kind(content_type: Optional[str], filename: Optional[str] = None) -> FileKind:
    """
    Classify an upload by MIME type, falling back to the file extension.

    Raises:
        UnsupportedFileKind: neither a PDF nor a supported image type
    """
    ct = (content_type or "").split(";")[0].strip().lower()
    if ct in PDF_CONTENT_TYPES:
        return FileKind.DOCUMENT
    if ct in IMAGE_CONTENT_TYPES:
        return FileKind.IMAGE

    ext = ""
    if filename and "." in filename:
        ext = "." + filename.rsplit(".", 1)[1].lower()
    if ext in PDF_EXTENSIONS:
        return FileKind.DOCUMENT
    if ext in IMAGE_EXTENSIONS:
        return FileKind.IMAGE

    raise UnsupportedFileKind(
        f"Unsupported file type {content_type or 'unknown'!r}; only PDF, JPEG, PNG and WebP are allowed"
    )


def infer_dpi(pixel_width: float, pixel_height: float) -> int:
    if pixel_width > PRINT_PIXEL_THRESHOLD or pixel_height > PRINT_PIXEL_THRESHOLD:
        return PRINT_DPI
    return SCREEN_DPI


def resolve_physical_dimensions(geometry: SourceGeometry) -> PhysicalDimensions:
    """
    Physical size in inches for already-decoded geometry.

    Examples:
        612x792 pt document  -> 8.5 x 11.0 in
        3000x4000 px image   -> 300 DPI -> 10.0 x 13.33 in
        800x600 px image     -> 72 DPI  -> 11.11 x 8.33 in
    """
    if geometry.kind is FileKind.DOCUMENT:
        return PhysicalDimensions(
            physical_width=geometry.width / POINTS_PER_INCH,
            physical_height=geometry.height / POINTS_PER_INCH,
        )
    if geometry.kind is FileKind.IMAGE:
        dpi = infer_dpi(geometry.width, geometry.height)
        return PhysicalDimensions(
            physical_width=geometry.width / dpi,
            physical_height=geometry.height / dpi,
            dpi=float(dpi),
        )
    raise UnsupportedFileKind(f"Unsupported file kind: {geometry.kind!r}")


def rendered_pixel_size(width_pt: float, height_pt: float) -> Tuple[int, int]:
    """Pixel size of the display raster produced for a PDF page."""
    longest = max(width_pt, height_pt) * PDF_RENDER_SCALE
    if longest > PDF_RENDER_MAX_PX:
        scale = PDF_RENDER_MAX_PX / max(width_pt, height_pt)
    else:
        scale = PDF_RENDER_SCALE
    return round(width_pt * scale), round(height_pt * scale)


class GeometryReader:
    """
    Decoder service for page/pixel geometry.

    Owns a small thread pool so decoding never blocks the event loop. One
    instance lives for the whole process: main.py calls start() during
    startup and close() during shutdown.
    """

    def __init__(self, max_workers: int = 2, max_image_pixels: int = DEFAULT_MAX_IMAGE_PIXELS):
        self.max_workers = max_workers
        self.max_image_pixels = max_image_pixels
        self._executor: Optional[ThreadPoolExecutor] = None

    @property
    def started(self) -> bool:
        return self._executor is not None

    def start(self) -> None:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=self.max_workers,
                thread_name_prefix="geometry-reader",
            )
            logger.info(f"✓ Geometry reader started ({self.max_workers} workers)")

    def close(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=False, cancel_futures=True)
            self._executor = None
            logger.info("Geometry reader stopped")

    def read(self, data: bytes, kind: FileKind) -> SourceGeometry:
        """
        Blocking decode of the file's intrinsic geometry.

        Raises:
            DecodeFailure: corrupt or empty file
        """
        if not data:
            raise DecodeFailure("File is empty")
        if kind is FileKind.DOCUMENT:
            return self._read_pdf(data)
        return self._read_image(data)

    async def read_async(self, data: bytes, kind: FileKind, timeout: float) -> SourceGeometry:
        if self._executor is None:
            raise RuntimeError("GeometryReader.start() has not been called")
        loop = asyncio.get_running_loop()
        future = loop.run_in_executor(self._executor, self.read, data, kind)
        try:
            return await asyncio.wait_for(future, timeout=timeout)
        except asyncio.TimeoutError:
            raise DecodeFailure(f"Decoding timed out after {timeout:.1f}s")

    @staticmethod
    def _read_pdf(data: bytes) -> SourceGeometry:
        try:
            doc = pdfium.PdfDocument(data)
        except pdfium.PdfiumError as e:
            raise DecodeFailure(f"Could not open PDF: {e}")
        try:
            if len(doc) == 0:
                raise DecodeFailure("PDF has no pages")
            # Only the first page is measured; mixed page sizes are not handled
            page = doc[0]
            try:
                width_pt, height_pt = page.get_size()
            finally:
                page.close()
        finally:
            doc.close()
        return SourceGeometry(kind=FileKind.DOCUMENT, width=float(width_pt), height=float(height_pt))

    def _read_image(self, data: bytes) -> SourceGeometry:
        """
        Read the pixel size from the image header.

        Pillow's decompression-bomb check is applied with this reader's limit
        instead of the library default, which rejects ordinary 300 DPI scans
        of large boards.
        """
        with _PILLOW_LIMIT_LOCK, warnings.catch_warnings():
            warnings.simplefilter("ignore", Image.DecompressionBombWarning)
            previous_limit = Image.MAX_IMAGE_PIXELS
            Image.MAX_IMAGE_PIXELS = self.max_image_pixels
            try:
                with Image.open(io.BytesIO(data)) as img:
                    width_px, height_px = img.size
            except Image.DecompressionBombError as e:
                raise DecodeFailure(f"Image is too large: {e}")
            except (UnidentifiedImageError, OSError) as e:
                raise DecodeFailure(f"Could not read image: {e}")
            finally:
                Image.MAX_IMAGE_PIXELS = previous_limit

        # Pillow only raises above twice its limit
        if width_px * height_px > self.max_image_pixels:
            raise DecodeFailure(
                f"Image is too large: {width_px}x{height_px} exceeds {self.max_image_pixels} pixels"
            )
        return SourceGeometry(kind=FileKind.IMAGE, width=float(width_px), height=float(height_px))


class DimensionResolver:
    """
    Resolves uploads into ResolvedDimensions using an injected GeometryReader.

    Results are cached by content hash; the physical size of a given file never
    changes once derived.
    """

    def __init__(self, reader: GeometryReader, *, timeout_s: float = 15.0, cache_size: int = 256):
        self.reader = reader
        self.timeout_s = timeout_s
        self._cache: LRUCache = LRUCache(maxsize=cache_size)

    async def resolve(
        self,
        data: bytes,
        content_type: Optional[str] = None,
        filename: Optional[str] = None,
    ) -> ResolvedDimensions:
        kind = detect_file_kind(content_type, filename)

        key = (kind.value, hashlib.sha256(data).hexdigest())
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        geometry = await self.reader.read_async(data, kind, timeout=self.timeout_s)
        physical = resolve_physical_dimensions(geometry)

        if kind is FileKind.DOCUMENT:
            original_w, original_h = rendered_pixel_size(geometry.width, geometry.height)
            logger.info(
                f"📐 PDF physical dimensions: {geometry.width:.2f}pt x {geometry.height:.2f}pt = "
                f"{physical.physical_width:.2f}\" x {physical.physical_height:.2f}\""
            )
        else:
            original_w, original_h = int(geometry.width), int(geometry.height)
            logger.info(
                f"📐 Image physical dimensions: {original_w}px x {original_h}px @ {physical.dpi:.0f} DPI = "
                f"{physical.physical_width:.2f}\" x {physical.physical_height:.2f}\""
            )

        resolved = ResolvedDimensions(
            kind=kind,
            physical=physical,
            original_width=original_w,
            original_height=original_h,
        )
        self._cache[key] = resolved
        return resolved
