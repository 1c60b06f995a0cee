"""PDF canvas for card sheets."""
from __future__ import annotations

import logging
from io import BytesIO
from pathlib import Path
from typing import TYPE_CHECKING, Optional, Protocol

from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from .config import COLS, ROWS, SheetLayout
from .errors import CanvasError
from .image_normalizer import NormalizedImage

if TYPE_CHECKING:
    from .layout import PlacementRectangle

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "Card proxy sheets"

# Length of the cut marks, in points (1 point = 1/72 inch)
CUT_MARK_LENGTH = 12


class SheetCanvas(Protocol):
    """The document surface the layout engine draws on."""

    def add_page(self, width_mm: float, height_mm: float) -> int:
        ...

    def draw_image(self, page: int, image: NormalizedImage, placement: PlacementRectangle) -> None:
        ...

    def save(self, destination: Path) -> None:
        ...


class ReportLabCanvas:
    """
    A ReportLab document built entirely in memory.

    Nothing touches the filesystem until `save` is called, so a document
    abandoned after an error leaves no partial file behind.
    """

    def __init__(self, layout: Optional[SheetLayout] = None, title: str = DEFAULT_TITLE) -> None:
        self.layout = layout
        self._buffer = BytesIO()
        self._canvas = canvas.Canvas(self._buffer)
        self._canvas.setTitle(title)
        self._current_page: Optional[int] = None
        self._page_count = 0

    @property
    def page_count(self) -> int:
        return self._page_count

    def add_page(self, width_mm: float, height_mm: float) -> int:
        """Start a new page and return its index."""
        if self._current_page is not None:
            self._canvas.showPage()
        self._canvas.setPageSize((width_mm * mm, height_mm * mm))
        self._current_page = self._page_count
        self._page_count += 1
        logger.debug("Started page %d (%.1f x %.1f mm)", self._current_page, width_mm, height_mm)

        if self.layout is not None and self.layout.cut_guides:
            draw_cut_guides(self._canvas, self.layout)
        return self._current_page

    def draw_image(self, page: int, image: NormalizedImage, placement: PlacementRectangle) -> None:
        """
        Draw `image` so it covers exactly its scaled physical size.

        Raises:
            CanvasError: If `page` is not the open page or ReportLab fails
        """
        if page != self._current_page:
            raise CanvasError(f"Page {page} is not open (current page: {self._current_page})")

        width_mm = image.descriptor.width_mm * placement.scale_x
        height_mm = image.descriptor.height_mm * placement.scale_y

        pil_image = image.image
        if image.has_alpha:
            pil_image = pil_image.convert("RGBA")
        elif pil_image.mode not in ("RGB", "L", "CMYK"):
            pil_image = pil_image.convert("RGB")

        try:
            self._canvas.drawImage(
                ImageReader(pil_image),
                placement.x_mm * mm,
                placement.y_mm * mm,
                width=width_mm * mm,
                height=height_mm * mm,
                preserveAspectRatio=False,
                anchor="sw",
                mask="auto",  # Respect transparent corners (e.g., PNG with alpha)
            )
        except Exception as e:
            raise CanvasError(f"Failed to draw image on page {page}: {e}") from e

    def save(self, destination: Path) -> None:
        """
        Finish the document and write it to `destination`.

        Raises:
            CanvasError: If the PDF cannot be rendered or written
        """
        destination = Path(destination)
        try:
            # Close the open page even when it is blank; save() alone drops empty pages
            if self._current_page is not None:
                self._canvas.showPage()
                self._current_page = None
            self._canvas.save()
            data = self._buffer.getvalue()
        except Exception as e:
            raise CanvasError(f"Failed to render PDF: {e}") from e

        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            destination.write_bytes(data)
        except OSError as e:
            raise CanvasError(f"Failed to write {destination}: {e}") from e
        logger.debug("Wrote %d page(s) to %s", self._page_count, destination)


def draw_cut_guides(c: canvas.Canvas, layout: SheetLayout) -> None:
    """
    Draw cut marks on the page edges for a grid of cards.

    One mark is drawn for every card edge:
    - vertical marks at top and bottom, for each card's left and right edge
    - horizontal marks at left and right, for each card's bottom and top edge

    Args:
        c: ReportLab canvas with the page already started
        layout: Sheet layout the page is drawn with
    """
    page_width = layout.page_width * mm
    page_height = layout.page_height * mm

    c.saveState()
    # Cut marks (black, thin)
    c.setLineWidth(0.5)
    c.setStrokeColorRGB(0, 0, 0)

    x_edges = set()
    for col in range(COLS):
        left = layout.margin_width + col * (layout.card_width + layout.gutter)
        x_edges.update((left, left + layout.card_width))
    y_edges = set()
    for row in range(ROWS):
        bottom = layout.margin_height + row * (layout.card_height + layout.gutter)
        y_edges.update((bottom, bottom + layout.card_height))

    for x_mm in sorted(x_edges):
        x = x_mm * mm
        # top
        c.line(x, page_height, x, page_height - CUT_MARK_LENGTH)
        # bottom
        c.line(x, 0, x, CUT_MARK_LENGTH)

    for y_mm in sorted(y_edges):
        y = y_mm * mm
        # left
        c.line(0, y, CUT_MARK_LENGTH, y)
        # right
        c.line(page_width, y, page_width - CUT_MARK_LENGTH, y)
    c.restoreState()


def get_file_size_str(file_path: Path) -> str:
    """
    Get a human-readable file size string.

    Args:
        file_path: Path to the file

    Returns:
        Size string like "1.5 MB" or "256 KB"
    """
    file_size = file_path.stat().st_size
    if file_size >= 1024 * 1024:
        return f"{file_size / (1024 * 1024):.1f} MB"
    else:
        return f"{file_size / 1024:.1f} KB"
