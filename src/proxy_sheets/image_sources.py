"""Reading card images from files, folders and ZIP archives."""
from __future__ import annotations

import logging
import zipfile
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, List, Optional

logger = logging.getLogger(__name__)


# Supported image extensions
IMAGE_EXTENSIONS = {".png", ".jpg", ".jpeg"}


@dataclass(frozen=True)
class ImageEntry:
    """A card image on disk, optionally inside a ZIP archive."""

    path: Path
    member: Optional[str] = None

    @property
    def name(self) -> str:
        if self.member is None:
            return self.path.name
        return f"{self.path.name}:{self.member}"

    def read_bytes(self) -> bytes:
        """Read the raw image bytes."""
        if self.member is None:
            return self.path.read_bytes()
        with zipfile.ZipFile(self.path, "r") as zf:
            return zf.read(self.member)


def is_image_file(name: str) -> bool:
    """Check if a filename has a supported image extension."""
    return Path(name).suffix.lower() in IMAGE_EXTENSIONS


def is_zip_archive(path: Path) -> bool:
    """Check if a file is a ZIP archive by name and content (not .docx, .jar, ...)."""
    return path.suffix.lower() == ".zip" and zipfile.is_zipfile(path)


def list_image_files(directory: Path) -> List[Path]:
    """
    List all image files and ZIP archives directly in a directory, sorted alphabetically.

    Args:
        directory: Folder to scan

    Returns:
        Sorted list of image and ZIP file paths
    """
    return sorted(
        path
        for path in directory.iterdir()
        if path.is_file() and (is_image_file(path.name) or is_zip_archive(path))
    )


def list_images_in_zip(zip_path: Path) -> List[str]:
    """
    List all image files in a ZIP archive.

    Filters out:
    - Directory entries (paths ending with /)
    - macOS metadata files (__MACOSX/)

    Args:
        zip_path: Path to the ZIP file

    Returns:
        Sorted list of image file names within the ZIP
    """
    with zipfile.ZipFile(zip_path, "r") as zf:
        return sorted(
            name
            for name in zf.namelist()
            if is_image_file(name)
            and not name.endswith("/")
            and not name.startswith("__MACOSX/")
        )


def iter_image_files(sources: Iterable[Path]) -> Iterator[ImageEntry]:
    """
    Expand image files, folders and ZIP archives into image entries.

    Sources are visited in the given order; folders and archives are expanded
    alphabetically. Missing or unreadable sources are logged and skipped.
    """
    for source in sources:
        source = Path(source)
        if source.is_dir():
            try:
                paths = list_image_files(source)
            except OSError as e:
                logger.warning("Skipping folder %s: %s", source, e)
                continue
            yield from iter_image_files(paths)
        elif source.is_file() and is_zip_archive(source):
            try:
                members = list_images_in_zip(source)
            except (OSError, zipfile.BadZipFile) as e:
                logger.warning("Skipping archive %s: %s", source, e)
                continue
            for member in members:
                yield ImageEntry(path=source, member=member)
        elif source.is_file():
            yield ImageEntry(path=source)
        else:
            logger.warning("Skipping %s: no such file or directory", source)


def iter_image_bytes(sources: Iterable[Path], copies: int = 1) -> Iterator[bytes]:
    """
    Lazily yield the raw bytes of every card image, `copies` times each.

    Each image is read only when the consumer asks for it. Images that cannot
    be read are logged and skipped; the sequence continues with the next one.
    """
    if copies < 1:
        raise ValueError(f"copies must be at least 1, got {copies}")

    for entry in iter_image_files(sources):
        try:
            data = entry.read_bytes()
        except (OSError, KeyError, zipfile.BadZipFile) as e:
            logger.warning("Skipping %s: %s", entry.name, e)
            continue
        logger.debug("Read %s (%d bytes)", entry.name, len(data))
        for _ in range(copies):
            yield data
