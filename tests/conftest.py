"""Shared fixtures for forager tests."""

import logging
from pathlib import Path

import pytest
from PIL import Image

from forager.identifiers import IdentifierCodec
from forager.iiif.v2 import BaseUrls
from forager.manifests import ManifestSource


PRESENTATION_BASE = "http://localhost:8989"
IMAGE_BASE = "https://images.example.org/iiif/2"


def write_image(path: Path, fmt: str = "JPEG", size: tuple[int, int] = (800, 1200)) -> Path:
    """Write a blank image of the given format and size."""
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.new("RGB", size, "white").save(path, format=fmt)
    return path


@pytest.fixture(autouse=True)
def reset_forager_logger():
    """Undo CLI logging setup so caplog sees forager records."""
    yield
    logger = logging.getLogger("forager")
    logger.handlers[:] = []
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def base_urls() -> BaseUrls:
    return BaseUrls(presentation=PRESENTATION_BASE, image=IMAGE_BASE)


@pytest.fixture
def source_root(tmp_path: Path) -> Path:
    """
    Source tree with one item directory:

        books/section1/page1.jpg   JPEG 800x1200
        books/section1/notes.txt   not an image
    """
    item = tmp_path / "books" / "section1"
    write_image(item / "page1.jpg", "JPEG", (800, 1200))
    (item / "notes.txt").write_text("not an image", encoding="utf-8")
    return tmp_path


@pytest.fixture
def manifest_source(source_root: Path, base_urls: BaseUrls) -> ManifestSource:
    return ManifestSource(codec=IdentifierCodec(source_root, "-"), base_urls=base_urls)


@pytest.fixture
def make_image():
    return write_image
