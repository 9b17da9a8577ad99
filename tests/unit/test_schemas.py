"""
Unit Tests for Pydantic Schemas
===============================
"""

from pathlib import Path

import pytest
from pydantic import ValidationError

from docshot.models.schemas import (
    Artifact,
    OutputFormat,
    RenderRequest,
    SectionRange,
    ViewportSpec,
)


class TestRenderRequest:
    """Test request validation and derived properties."""

    def test_defaults(self, tmp_path):
        request = RenderRequest(source_document="<p>x</p>", output_directory=tmp_path)

        assert request.primary_format == OutputFormat.PNG
        assert request.extra_formats == ()
        assert request.quality == 90
        assert request.scale == 2.0
        assert request.auto_size is True
        assert request.split_into_sections is False
        assert request.section_selector == "h1, h2, h3"
        assert request.max_height == 15000
        assert request.wait_millis == 5000
        assert request.timeout_millis == 60000
        assert request.template_id == "default"

    def test_extra_formats_deduplicated_in_order(self, tmp_path):
        request = RenderRequest(
            source_document="",
            output_directory=tmp_path,
            primary_format="jpeg",
            extra_formats=["pdf", "jpeg", "png", "pdf"],
        )

        assert request.extra_formats == (OutputFormat.PDF, OutputFormat.PNG)
        assert request.formats == (OutputFormat.JPEG, OutputFormat.PDF, OutputFormat.PNG)

    def test_unknown_format_rejected(self, tmp_path):
        with pytest.raises(ValidationError):
            RenderRequest(source_document="", output_directory=tmp_path, primary_format="gif")

    @pytest.mark.parametrize("quality", [-1, 101])
    def test_quality_bounds(self, tmp_path, quality):
        with pytest.raises(ValidationError):
            RenderRequest(source_document="", output_directory=tmp_path, quality=quality)

    def test_blank_prefix_is_none(self, tmp_path):
        request = RenderRequest(source_document="", output_directory=tmp_path, file_name_prefix="  ")

        assert request.file_name_prefix is None

    def test_request_is_frozen(self, tmp_path):
        request = RenderRequest(source_document="", output_directory=tmp_path)

        with pytest.raises(ValidationError):
            request.quality = 10

    @pytest.mark.parametrize(
        "overrides, expected",
        [
            ({}, True),
            ({"fixed_width": 800}, True),
            ({"fixed_width": 800, "fixed_height": 600}, False),
            ({"auto_size": False}, False),
        ],
    )
    def test_wants_auto_size(self, tmp_path, overrides, expected):
        request = RenderRequest(source_document="", output_directory=tmp_path, **overrides)

        assert request.wants_auto_size is expected

    def test_from_settings(self, tmp_path, test_settings):
        request = RenderRequest.from_settings(
            "<p>x</p>", str(tmp_path), settings=test_settings, quality=70
        )

        assert request.output_directory == Path(tmp_path)
        assert request.quality == 70
        assert request.wait_millis == test_settings.default_wait_millis
        assert request.primary_format == OutputFormat(test_settings.default_format)


class TestGeometry:
    """Test viewport and section models."""

    def test_viewport_as_playwright(self):
        viewport = ViewportSpec(width=1200, height=900, device_scale_factor=2.0)

        assert viewport.as_playwright() == {"width": 1200, "height": 900}

    def test_viewport_rejects_zero(self):
        with pytest.raises(ValidationError):
            ViewportSpec(width=0, height=10, device_scale_factor=1.0)

    def test_section_height(self):
        assert SectionRange(start_offset=100, end_offset=350).height == 250

    def test_empty_section_rejected(self):
        with pytest.raises(ValidationError, match="greater than its start"):
            SectionRange(start_offset=100, end_offset=100)


class TestArtifact:
    def test_preview_flag(self, tmp_path):
        image = Artifact(path=tmp_path / "a.png", format=OutputFormat.PNG, backend="playwright")
        preview = Artifact(path=tmp_path / "a.html", format="html", backend="preview")

        assert not image.is_preview
        assert preview.is_preview

    def test_output_format_is_raster(self):
        assert OutputFormat.WEBP.is_raster
        assert not OutputFormat.PDF.is_raster
