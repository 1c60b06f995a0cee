"""Shared fixtures: in-memory card images and a recording canvas."""
from __future__ import annotations

import os
from io import BytesIO
from pathlib import Path
from typing import List, Tuple

import pytest
from PIL import Image


def make_image_bytes(
    width: int = 63,
    height: int = 88,
    fmt: str = "JPEG",
    mode: str = "RGB",
    noise: bool = False,
    **save_kwargs,
) -> bytes:
    """Encode a synthetic card image."""
    if noise:
        channels = len(mode)
        image = Image.frombytes(mode, (width, height), os.urandom(width * height * channels))
    else:
        color = {"RGBA": (200, 30, 30, 128), "LA": (120, 128), "L": 120}.get(mode, (200, 30, 30))
        image = Image.new(mode, (width, height), color)
    buffer = BytesIO()
    image.save(buffer, format=fmt, **save_kwargs)
    return buffer.getvalue()


class RecordingCanvas:
    """Canvas double that remembers every call made by the layout engine."""

    def __init__(self) -> None:
        self.pages: List[Tuple[float, float]] = []
        self.draws: List[tuple] = []
        self.saved_to: List[Path] = []

    def add_page(self, width_mm: float, height_mm: float) -> int:
        self.pages.append((width_mm, height_mm))
        return len(self.pages) - 1

    def draw_image(self, page, image, placement) -> None:
        self.draws.append((page, image, placement))

    def save(self, destination: Path) -> None:
        self.saved_to.append(Path(destination))


@pytest.fixture
def jpeg_bytes() -> bytes:
    return make_image_bytes(30, 42)


@pytest.fixture
def png_bytes() -> bytes:
    return make_image_bytes(30, 42, fmt="PNG", mode="RGBA")


@pytest.fixture
def recording_canvas() -> RecordingCanvas:
    return RecordingCanvas()
