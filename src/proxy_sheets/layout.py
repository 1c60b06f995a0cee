"""Placement of card images on a paginated 3x3 grid."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, Iterator, Optional, Tuple

from .config import CARDS_PER_PAGE, COLS, DecodeFailurePolicy, SheetLayout
from .errors import ImageError
from .image_normalizer import ImageDescriptor, NormalizedImage, normalize_image
from .pdf_generator import DEFAULT_TITLE, ReportLabCanvas, SheetCanvas

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CellAddress:
    """Grid slot of a card. Row 0 is the bottom row (PDF origin is bottom-left)."""

    page: int
    row: int
    column: int


@dataclass(frozen=True)
class PlacementRectangle:
    """Where and how to draw an image so it covers exactly one card."""

    x_mm: float
    y_mm: float
    scale_x: float
    scale_y: float
    dpi: float


@dataclass(frozen=True)
class PlacedCard:
    """One step of the layout: an input image and the cell it lands in."""

    index: int
    cell: CellAddress
    image: Optional[NormalizedImage]
    placement: Optional[PlacementRectangle]

    @property
    def skipped(self) -> bool:
        return self.image is None


@dataclass(frozen=True)
class LayoutSummary:
    """Outcome of rendering one document."""

    cards_placed: int
    cards_skipped: int
    page_count: int


class SheetLayoutEngine:
    """
    Lays out card images 9 per page and drives a canvas to draw them.

    The engine only holds its immutable layout; the running cell counter and
    the open page live inside a single `render` call, so one engine can be
    shared between documents.
    """

    def __init__(self, layout: Optional[SheetLayout] = None) -> None:
        self.layout = layout or SheetLayout()

    @staticmethod
    def cell_for_index(index: int) -> CellAddress:
        """Map the 0-based position of an image to its page, row and column."""
        if index < 0:
            raise ValueError(f"Card index must not be negative, got {index}")
        page, slot = divmod(index, CARDS_PER_PAGE)
        row, column = divmod(slot, COLS)
        return CellAddress(page=page, row=row, column=column)

    def cell_origin(self, row: int, column: int) -> Tuple[float, float]:
        """Bottom-left corner of a cell, in millimeters from the page origin."""
        layout = self.layout
        x = column * layout.card_width + column * layout.gutter + layout.margin_width
        y = row * layout.card_height + row * layout.gutter + layout.margin_height
        return x, y

    def placement_for(self, descriptor: ImageDescriptor, row: int, column: int) -> PlacementRectangle:
        """
        Compute the placement that stretches an image over one card.

        Both axes are scaled independently, so the drawn size is always the
        configured card size whatever the image's aspect ratio.
        """
        x, y = self.cell_origin(row, column)
        return PlacementRectangle(
            x_mm=x,
            y_mm=y,
            scale_x=self.layout.card_width / descriptor.width_mm,
            scale_y=self.layout.card_height / descriptor.height_mm,
            dpi=self.layout.dpi,
        )

    def iter_placements(self, images: Iterable[bytes]) -> Iterator[PlacedCard]:
        """
        Lazily place each image buffer, pulling one buffer per step.

        Raises:
            UnsupportedFormat: If an image is not JPEG/PNG and the policy is ABORT
            DecodeError: If an image is corrupt and the policy is ABORT
        """
        # Start on the last slot so the first image opens a new page
        slot = CARDS_PER_PAGE - 1
        page = -1

        for index, data in enumerate(images):
            slot = (slot + 1) % CARDS_PER_PAGE
            row, column = divmod(slot, COLS)
            if row == 0 and column == 0:
                page += 1
            cell = CellAddress(page=page, row=row, column=column)

            try:
                image = normalize_image(data, self.layout.dpi)
            except ImageError as e:
                if self.layout.on_decode_failure is DecodeFailurePolicy.ABORT:
                    raise
                logger.warning("Leaving card %d blank (page %d): %s", index, page, e)
                yield PlacedCard(index=index, cell=cell, image=None, placement=None)
                continue

            placement = self.placement_for(image.descriptor, row, column)
            logger.debug(
                "Card %d -> page %d row %d col %d at (%.2f, %.2f) mm",
                index, page, row, column, placement.x_mm, placement.y_mm,
            )
            yield PlacedCard(index=index, cell=cell, image=image, placement=placement)

    def render(
        self,
        images: Iterable[bytes],
        canvas: SheetCanvas,
        progress_callback: Optional[Callable[[PlacedCard], None]] = None,
    ) -> LayoutSummary:
        """
        Draw every image on `canvas`, adding pages as they are needed.

        Args:
            images: Raw image buffers in print order
            canvas: Canvas receiving pages and images
            progress_callback: Optional callback invoked after each card

        Returns:
            Counts of placed and skipped cards and of pages created
        """
        placed = skipped = pages = 0
        current_page: Optional[int] = None

        for card in self.iter_placements(images):
            if card.cell.row == 0 and card.cell.column == 0:
                current_page = canvas.add_page(self.layout.page_width, self.layout.page_height)
                pages += 1

            if card.skipped:
                skipped += 1
            else:
                canvas.draw_image(current_page, card.image, card.placement)
                placed += 1

            if progress_callback is not None:
                progress_callback(card)

        return LayoutSummary(cards_placed=placed, cards_skipped=skipped, page_count=pages)


def build_proxy_pdf(
    images: Iterable[bytes],
    output_path: Path,
    layout: Optional[SheetLayout] = None,
    canvas: Optional[SheetCanvas] = None,
    title: Optional[str] = None,
    progress_callback: Optional[Callable[[PlacedCard], None]] = None,
) -> LayoutSummary:
    """
    High-level helper:
    - Lays out all images on 3x3 sheets
    - Saves the PDF only once every image has been placed

    Args:
        images: Raw image buffers in print order
        output_path: Path to the output PDF file
        layout: Sheet layout (default: sleeve-sized cards on 210x279 mm)
        canvas: Canvas to draw on (default: a new in-memory ReportLab document)
        title: Document title for the default canvas
        progress_callback: Optional callback invoked after each card

    Raises:
        UnsupportedFormat, DecodeError: On a bad image when the policy is ABORT
        CanvasError: If drawing or saving fails
    """
    engine = SheetLayoutEngine(layout)
    if canvas is None:
        canvas = ReportLabCanvas(engine.layout, title=title or DEFAULT_TITLE)

    summary = engine.render(images, canvas, progress_callback=progress_callback)
    canvas.save(output_path)
    logger.info(
        "Saved %d card(s) on %d page(s) to %s",
        summary.cards_placed, summary.page_count, output_path,
    )
    return summary
