"""Tests for the Pillow image classifier."""

import logging

import pytest

from forager.iiif.v2 import ImageFormat
from forager.imaging import ImageInfo, PillowClassifier


class TestPillowClassifier:
    """Tests for PillowClassifier.classify()."""

    def test_jpeg(self, tmp_path, make_image):
        path = make_image(tmp_path / "page1.jpg", "JPEG", (800, 1200))
        assert PillowClassifier().classify(path) == ImageInfo(ImageFormat.JPEG, 800, 1200)

    def test_png(self, tmp_path, make_image):
        path = make_image(tmp_path / "page2.png", "PNG", (400, 600))
        assert PillowClassifier().classify(path) == ImageInfo(ImageFormat.PNG, 400, 600)

    def test_format_detected_from_content(self, tmp_path, make_image):
        """Test that the file extension is not what decides the format."""
        path = make_image(tmp_path / "scan.dat", "PNG", (10, 20))
        info = PillowClassifier().classify(path)
        assert info is not None
        assert info.format is ImageFormat.PNG

    def test_other_image_format_is_unknown(self, tmp_path, make_image):
        """Test that images Pillow reads but which are not JPEG/PNG are UNKNOWN."""
        path = make_image(tmp_path / "scan.gif", "GIF", (30, 40))
        assert PillowClassifier().classify(path) == ImageInfo(ImageFormat.UNKNOWN, 30, 40)

    def test_text_file_is_not_an_image(self, tmp_path):
        path = tmp_path / "notes.txt"
        path.write_text("not an image", encoding="utf-8")
        assert PillowClassifier().classify(path) is None

    def test_empty_file_is_not_an_image(self, tmp_path):
        path = tmp_path / "empty.jpg"
        path.write_bytes(b"")
        assert PillowClassifier().classify(path) is None

    def test_missing_file_raises(self, tmp_path):
        """Test that read errors propagate to the caller."""
        with pytest.raises(OSError):
            PillowClassifier().classify(tmp_path / "missing.jpg")

    def test_corrupt_header_is_not_an_image(self, tmp_path, caplog):
        """Test that a plugin failing on a malformed header does not raise."""
        path = tmp_path / "scan.ppm"
        path.write_bytes(b"P6\nx4 10\n255\n")

        with caplog.at_level(logging.WARNING, logger="forager"):
            assert PillowClassifier().classify(path) is None

        records = [r for r in caplog.records if r.getMessage() == "image_unreadable"]
        assert len(records) == 1
        assert records[0].path == str(path)
        assert records[0].error.startswith("ValueError")
