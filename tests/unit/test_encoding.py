"""
Unit Tests for Image Encoding
=============================
"""

import io

import pytest
from PIL import Image  # type: ignore

from docshot.core.rendering.encoding import stack_vertically, transcode
from docshot.models.schemas import OutputFormat

from tests.utils.helpers import image_size, make_png


class TestTranscode:
    """Test PNG to output format conversion."""

    def test_png_passthrough(self):
        png = make_png()

        assert transcode(png, OutputFormat.PNG) is png

    def test_jpeg_is_flattened(self):
        data = transcode(make_png(color=(0, 0, 0, 0)), OutputFormat.JPEG, quality=80)

        with Image.open(io.BytesIO(data)) as image:
            assert image.format == "JPEG"
            assert image.mode == "RGB"
            # Transparent pixels land on white
            assert all(channel > 240 for channel in image.getpixel((5, 5)))

    def test_webp_keeps_alpha_when_transparent(self):
        data = transcode(make_png(color=(10, 20, 30, 0)), OutputFormat.WEBP, transparent=True)

        with Image.open(io.BytesIO(data)) as image:
            assert image.format == "WEBP"
            assert image.mode == "RGBA"

    def test_webp_opaque_by_default(self):
        data = transcode(make_png(), OutputFormat.WEBP)

        with Image.open(io.BytesIO(data)) as image:
            assert image.format == "WEBP"
            assert image.mode == "RGB"

    def test_pdf(self):
        data = transcode(make_png(), OutputFormat.PDF)

        assert data.startswith(b"%PDF")

    def test_dimensions_preserved(self):
        data = transcode(make_png(width=120, height=45), OutputFormat.JPEG)

        assert image_size(data) == (120, 45)

    def test_unknown_format_rejected(self):
        with pytest.raises(ValueError, match="Unsupported output format"):
            transcode(make_png(), "tiff")  # type: ignore[arg-type]


class TestStackVertically:
    """Test stitching page rasters."""

    def test_empty_rejected(self):
        with pytest.raises(ValueError):
            stack_vertically([])

    def test_single_page_passthrough(self):
        page = make_png()

        assert stack_vertically([page]) is page

    def test_pages_stacked(self):
        data = stack_vertically([make_png(100, 50), make_png(80, 70)])

        assert image_size(data) == (100, 120)
