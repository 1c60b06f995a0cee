from __future__ import annotations

import pytest

from proxy_sheets.errors import DecodeError, ImageError, UnsupportedFormat
from proxy_sheets.image_normalizer import ImageDescriptor, ImageFormat, detect_format, normalize_image

from .conftest import make_image_bytes


def test_detect_format(jpeg_bytes, png_bytes):
    assert detect_format(jpeg_bytes) is ImageFormat.JPEG
    assert detect_format(png_bytes) is ImageFormat.PNG


@pytest.mark.parametrize(
    "data",
    [
        b"",
        b"GIF89a\x01\x00\x01\x00",
        b"%PDF-1.7",
        b"\xff\xd8",  # shorter than the JPEG signature
        make_image_bytes(10, 10, fmt="BMP"),
    ],
)
def test_unrecognized_signatures(data):
    with pytest.raises(UnsupportedFormat):
        detect_format(data)
    with pytest.raises(UnsupportedFormat):
        normalize_image(data, dpi=300)


def test_normalize_jpeg_reports_pixel_size(jpeg_bytes):
    image = normalize_image(jpeg_bytes, dpi=300)

    assert image.format is ImageFormat.JPEG
    assert image.descriptor == ImageDescriptor(width_px=30, height_px=42, dpi=300)
    assert image.image.size == (30, 42)
    assert not image.has_alpha


def test_normalize_png_keeps_alpha(png_bytes):
    image = normalize_image(png_bytes, dpi=300)

    assert image.format is ImageFormat.PNG
    assert image.has_alpha
    assert image.image.mode == "RGBA"


def test_embedded_density_is_ignored():
    data = make_image_bytes(144, 72, fmt="PNG", dpi=(72, 72))

    descriptor = normalize_image(data, dpi=300).descriptor

    assert descriptor.dpi == 300
    assert descriptor.width_mm == pytest.approx(144 / 300 * 25.4)
    assert descriptor.height_mm == pytest.approx(72 / 300 * 25.4)


@pytest.mark.parametrize("fmt", ["PNG", "JPEG"])
def test_truncated_image_is_a_decode_error(fmt):
    data = make_image_bytes(64, 64, fmt=fmt, noise=True)

    with pytest.raises(DecodeError) as excinfo:
        normalize_image(data[: len(data) // 2], dpi=300)
    assert excinfo.value.__cause__ is not None


@pytest.mark.parametrize(
    "data",
    [
        b"\x89PNG\r\n\x1a\n" + b"garbage" * 10,
        b"\xff\xd8\xff" + b"\x00" * 32,
    ],
)
def test_corrupt_header_is_a_decode_error(data):
    with pytest.raises(DecodeError):
        normalize_image(data, dpi=300)


def test_decode_errors_share_a_base_class():
    assert issubclass(DecodeError, ImageError)
    assert issubclass(UnsupportedFormat, ImageError)
