"""Exception types raised while building proxy sheets."""
from __future__ import annotations


class ProxySheetError(Exception):
    """Base class for all errors raised by proxy_sheets."""


class LayoutConfigError(ProxySheetError, ValueError):
    """Raised when a sheet layout cannot fit a 3x3 grid on its page."""


class ImageError(ProxySheetError):
    """Base class for failures while normalizing a card image."""


class UnsupportedFormat(ImageError):
    """The byte buffer does not start with a supported image signature."""


class DecodeError(ImageError):
    """The signature was recognized but the image data could not be decoded."""


class CanvasError(ProxySheetError):
    """The PDF canvas failed to draw or save the document."""
