"""
Image classification for directory entries.

The classifier decides which files become canvases. It reports format and
pixel dimensions and never decodes pixel data.
"""

from __future__ import annotations

import logging
import struct
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from PIL import Image, UnidentifiedImageError

from forager.iiif.v2.models import ImageFormat


LOGGER = logging.getLogger("forager.imaging")

PIL_FORMATS = {
    "JPEG": ImageFormat.JPEG,
    "MPO": ImageFormat.JPEG,  # multi-picture JPEG as written by many cameras
    "PNG": ImageFormat.PNG,
}

# Raised by Pillow format plugins on corrupt headers
CORRUPT_HEADER_ERRORS = (ValueError, SyntaxError, struct.error)


@dataclass(frozen=True)
class ImageInfo:
    """Format and pixel dimensions of an image file."""

    format: ImageFormat
    width: int
    height: int


class ImageClassifier(Protocol):
    """Minimal interface for deciding whether a file is an image."""

    def classify(self, path: Path) -> ImageInfo | None:
        ...


@dataclass
class PillowClassifier:
    """Pillow-backed classifier.

    ``Image.open`` only parses the file header, so classification never
    decodes pixel data. Formats Pillow reads but which are neither JPEG nor
    PNG are reported as ``ImageFormat.UNKNOWN``.

    Read errors (``OSError``) propagate to the caller. Files Pillow cannot
    identify, files with corrupt headers and oversized images are reported
    as not being images.
    """

    def classify(self, path: Path) -> ImageInfo | None:
        try:
            with Image.open(path) as img:
                width, height = img.size
                image_format = PIL_FORMATS.get(img.format or "", ImageFormat.UNKNOWN)
        except UnidentifiedImageError:
            return None
        except CORRUPT_HEADER_ERRORS as e:
            LOGGER.warning(
                "image_unreadable",
                extra={"path": str(path), "error": f"{type(e).__name__}: {e}"},
            )
            return None
        except Image.DecompressionBombError as e:
            LOGGER.warning(
                "image_too_large",
                extra={"path": str(path), "error": str(e)},
            )
            return None
        return ImageInfo(format=image_format, width=width, height=height)
