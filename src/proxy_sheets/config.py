"""Physical sheet layout configuration."""
from __future__ import annotations

from dataclasses import dataclass, fields, replace
from enum import Enum
from typing import Any, Dict

from .errors import LayoutConfigError


# Grid layout
ROWS = 3
COLS = 3
CARDS_PER_PAGE = ROWS * COLS

MM_PER_INCH = 25.4


class DecodeFailurePolicy(str, Enum):
    """What to do when a card image cannot be normalized."""

    ABORT = "abort"  # fail the whole document, nothing is saved
    SKIP = "skip"  # leave the cell blank and keep going


@dataclass(frozen=True)
class SheetLayout:
    """
    Immutable description of a printable card sheet.

    All lengths are in millimeters. Margins are derived from the page size,
    card size and gutter so the 3x3 grid is always centered on the page.

    Raises:
        LayoutConfigError: If the grid does not fit on the page
    """

    page_width: float = 210.0
    page_height: float = 279.0
    # Undersized by 2 mm so printed cards fit in a sleeve
    card_width: float = 61.5
    card_height: float = 86.9
    gutter: float = 1.0
    dpi: float = 300.0
    on_decode_failure: DecodeFailurePolicy = DecodeFailurePolicy.ABORT
    cut_guides: bool = False

    def __post_init__(self) -> None:
        for name in ("page_width", "page_height", "card_width", "card_height", "dpi"):
            value = getattr(self, name)
            if value <= 0:
                raise LayoutConfigError(f"{name} must be positive, got {value}")
        if self.gutter < 0:
            raise LayoutConfigError(f"gutter must not be negative, got {self.gutter}")
        if self.card_width >= self.page_width / COLS:
            raise LayoutConfigError(
                f"card width {self.card_width} mm does not fit {COLS} columns "
                f"on a {self.page_width} mm wide page"
            )
        if self.card_height >= self.page_height / ROWS:
            raise LayoutConfigError(
                f"card height {self.card_height} mm does not fit {ROWS} rows "
                f"on a {self.page_height} mm high page"
            )
        if self.margin_width < 0 or self.margin_height < 0:
            raise LayoutConfigError(
                f"gutter of {self.gutter} mm leaves negative margins "
                f"({self.margin_width:.2f} x {self.margin_height:.2f} mm)"
            )
        # Accept plain strings coming from the CLI
        try:
            policy = DecodeFailurePolicy(self.on_decode_failure)
        except ValueError:
            raise LayoutConfigError(
                f"Unknown decode failure policy {self.on_decode_failure!r}"
            ) from None
        object.__setattr__(self, "on_decode_failure", policy)

    @property
    def margin_width(self) -> float:
        """Left/right margin around the grid."""
        return (self.page_width - COLS * self.card_width - (COLS - 1) * self.gutter) / 2.0

    @property
    def margin_height(self) -> float:
        """Top/bottom margin around the grid."""
        return (self.page_height - ROWS * self.card_height - (ROWS - 1) * self.gutter) / 2.0

    @classmethod
    def preset(cls, name: str) -> "SheetLayout":
        """
        Return one of the named layouts in `PRESETS`.

        Raises:
            LayoutConfigError: If the preset name is unknown
        """
        try:
            return cls(**PRESETS[name])
        except KeyError:
            known = ", ".join(sorted(PRESETS))
            raise LayoutConfigError(f"Unknown preset {name!r} (known: {known})") from None

    def with_overrides(self, **overrides: Any) -> "SheetLayout":
        """Return a validated copy, ignoring overrides that are None."""
        known = {f.name for f in fields(self)}
        unknown = set(overrides) - known
        if unknown:
            raise LayoutConfigError(f"Unknown layout option(s): {', '.join(sorted(unknown))}")
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})


PRESETS: Dict[str, Dict[str, float]] = {
    # Slightly smaller than a real card, fits snugly in a sleeve
    "sleeve": {"card_width": 61.5, "card_height": 86.9},
    # True poker card size
    "full": {"card_width": 63.5, "card_height": 88.9},
}
