"""Card image detection and decoding."""
from __future__ import annotations

import struct
from dataclasses import dataclass
from enum import Enum
from io import BytesIO

from PIL import Image

from .config import MM_PER_INCH
from .errors import DecodeError, UnsupportedFormat


class ImageFormat(str, Enum):
    """Image codecs accepted as card images (values are Pillow format names)."""

    JPEG = "JPEG"
    PNG = "PNG"


# Leading bytes identifying each supported codec
SIGNATURES = {
    ImageFormat.JPEG: b"\xff\xd8\xff",
    ImageFormat.PNG: b"\x89PNG\r\n\x1a\n",
}


@dataclass(frozen=True)
class ImageDescriptor:
    """Pixel size of a decoded image and the density used to measure it."""

    width_px: int
    height_px: int
    dpi: float

    @property
    def width_mm(self) -> float:
        return self.width_px / self.dpi * MM_PER_INCH

    @property
    def height_mm(self) -> float:
        return self.height_px / self.dpi * MM_PER_INCH


@dataclass(frozen=True)
class NormalizedImage:
    """A decoded card image, ready to be drawn on a canvas."""

    format: ImageFormat
    descriptor: ImageDescriptor
    image: Image.Image

    @property
    def has_alpha(self) -> bool:
        return self.image.mode in ("RGBA", "LA", "PA") or "transparency" in self.image.info


def detect_format(data: bytes) -> ImageFormat:
    """
    Identify the codec of an image buffer from its signature.

    Raises:
        UnsupportedFormat: If the buffer is not a JPEG or PNG image
    """
    for image_format, signature in SIGNATURES.items():
        if data.startswith(signature):
            return image_format
    raise UnsupportedFormat(f"Unsupported image signature: {bytes(data[:8])!r}")


def normalize_image(data: bytes, dpi: float) -> NormalizedImage:
    """
    Decode a card image held in memory.

    The image's own density metadata is ignored; `dpi` is used for every
    image so all cards are measured the same way.

    Args:
        data: Raw image bytes
        dpi: Density used to convert pixels to millimeters

    Returns:
        The decoded image with its descriptor

    Raises:
        UnsupportedFormat: If the signature is not JPEG or PNG
        DecodeError: If the signature matches but the data is corrupt or truncated
    """
    image_format = detect_format(data)
    try:
        image = Image.open(BytesIO(data), formats=[image_format.value])
        # Force a full decode so truncated data fails here, not while drawing
        image.load()
    except (OSError, SyntaxError, ValueError, struct.error, Image.DecompressionBombError) as e:
        raise DecodeError(f"Could not decode {image_format.value} image: {e}") from e

    width, height = image.size
    if width <= 0 or height <= 0:
        raise DecodeError(f"{image_format.value} image has no pixels ({width}x{height})")

    return NormalizedImage(
        format=image_format,
        descriptor=ImageDescriptor(width_px=width, height_px=height, dpi=dpi),
        image=image,
    )
