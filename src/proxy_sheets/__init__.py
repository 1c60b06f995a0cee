"""
Package initialization for proxy_sheets.

This package lays out card images on printable 3x3 sheets with an exact
physical card size and writes them to a PDF.

Modules:
    - config: Sheet layout (page, card, gutter, density) and derived margins
    - image_normalizer: JPEG/PNG detection and decoding
    - layout: Grid placement engine and the high-level build helper
    - pdf_generator: ReportLab canvas and cut guides
    - image_sources: Reading images from files, folders and ZIP archives
"""

from .config import DecodeFailurePolicy, SheetLayout
from .errors import (
    CanvasError,
    DecodeError,
    ImageError,
    LayoutConfigError,
    ProxySheetError,
    UnsupportedFormat,
)
from .image_normalizer import ImageDescriptor, ImageFormat, NormalizedImage, detect_format, normalize_image
from .image_sources import iter_image_bytes, iter_image_files
from .layout import (
    CellAddress,
    LayoutSummary,
    PlacedCard,
    PlacementRectangle,
    SheetLayoutEngine,
    build_proxy_pdf,
)
from .pdf_generator import ReportLabCanvas, SheetCanvas

__version__ = "0.1.0"

__all__ = [
    "SheetLayout",
    "DecodeFailurePolicy",
    "ProxySheetError",
    "LayoutConfigError",
    "ImageError",
    "UnsupportedFormat",
    "DecodeError",
    "CanvasError",
    "ImageFormat",
    "ImageDescriptor",
    "NormalizedImage",
    "detect_format",
    "normalize_image",
    "iter_image_files",
    "iter_image_bytes",
    "CellAddress",
    "PlacementRectangle",
    "PlacedCard",
    "LayoutSummary",
    "SheetLayoutEngine",
    "build_proxy_pdf",
    "ReportLabCanvas",
    "SheetCanvas",
]
