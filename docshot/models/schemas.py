"""
Pydantic Models and Schemas
===========================

Core data models for render requests, resolved capture geometry and produced artifacts.
"""

from typing import Optional, Tuple, Union, Any
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator, model_validator

from docshot.config.settings import Settings, get_settings


# Enums
class OutputFormat(str, Enum):
    """Artifact output formats."""
    PNG = "png"
    JPEG = "jpeg"
    WEBP = "webp"
    PDF = "pdf"

    @property
    def is_raster(self) -> bool:
        return self is not OutputFormat.PDF


class BackendKind(str, Enum):
    """Rendering backend priority class."""
    PRIMARY = "primary"
    SECONDARY = "secondary"
    NONE = "none"


class BackendCapability(str, Enum):
    """Probe result for a rendering backend."""
    AVAILABLE = "available"
    UNAVAILABLE = "unavailable"
    UNTESTED = "untested"


PREVIEW_FORMAT = "html"


# Request Models
class RenderRequest(BaseModel):
    """One conversion call: the finished HTML plus every rendering directive."""

    model_config = ConfigDict(frozen=True)

    source_document: str = Field(..., description="Finished HTML document")
    output_directory: Path = Field(..., description="Directory receiving the artifacts")
    primary_format: OutputFormat = Field(OutputFormat.PNG, description="Format captured first")
    extra_formats: Tuple[OutputFormat, ...] = Field(
        default=(), description="Additional formats, in capture order"
    )
    quality: int = Field(90, ge=0, le=100, description="Lossy encoder quality")
    scale: float = Field(2.0, gt=0, description="Device pixel ratio")
    fixed_width: Optional[int] = Field(None, gt=0, description="Fixed viewport width")
    fixed_height: Optional[int] = Field(None, gt=0, description="Fixed viewport height")
    auto_size: bool = Field(True, description="Size the viewport from the content")
    transparent_background: bool = Field(False, description="Omit the page background")
    split_into_sections: bool = Field(False, description="Capture one image per heading")
    section_selector: str = Field("h1, h2, h3", min_length=1, description="Heading selector")
    max_height: int = Field(15000, gt=0, description="Auto-size height that prefers splitting")
    wait_millis: int = Field(5000, ge=0, description="Settle delay after network idle")
    timeout_millis: int = Field(60000, gt=0, description="Timeout per capture operation")
    file_name_prefix: Optional[str] = Field(None, description="Leading file name component")
    template_id: str = Field("default", min_length=1, description="Template identifier")

    @field_validator("extra_formats")
    @classmethod
    def drop_primary_from_extras(
        cls, v: Tuple[OutputFormat, ...], info: ValidationInfo
    ) -> Tuple[OutputFormat, ...]:
        """Keep extra formats ordered, unique and distinct from the primary format."""
        primary = info.data.get("primary_format")
        seen: list[OutputFormat] = []
        for fmt in v:
            if fmt != primary and fmt not in seen:
                seen.append(fmt)
        return tuple(seen)

    @field_validator("file_name_prefix")
    @classmethod
    def blank_prefix_is_none(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            return None
        return v

    @property
    def formats(self) -> Tuple[OutputFormat, ...]:
        """Primary format followed by the extra formats."""
        return (self.primary_format,) + self.extra_formats

    @property
    def wants_auto_size(self) -> bool:
        """Auto-size applies unless both fixed dimensions were given."""
        return self.auto_size and not (self.fixed_width and self.fixed_height)

    @classmethod
    def from_settings(
        cls,
        source_document: str,
        output_directory: Union[str, Path],
        settings: Optional[Settings] = None,
        **overrides: Any,
    ) -> "RenderRequest":
        """Build a request from the configured defaults, applying explicit overrides."""
        settings = settings or get_settings()
        values: dict = {
            "primary_format": settings.default_format,
            "quality": settings.default_quality,
            "scale": settings.default_scale,
            "section_selector": settings.default_section_selector,
            "max_height": settings.default_max_height,
            "wait_millis": settings.default_wait_millis,
            "timeout_millis": settings.default_timeout_millis,
            "template_id": settings.default_template_id,
        }
        values.update(overrides)
        return cls(
            source_document=source_document,
            output_directory=Path(output_directory),
            **values,
        )


# Capture Geometry
class ViewportSpec(BaseModel):
    """Resolved, concrete capture dimensions."""

    model_config = ConfigDict(frozen=True)

    width: int = Field(..., gt=0, description="Viewport width in CSS pixels")
    height: int = Field(..., gt=0, description="Viewport height in CSS pixels")
    device_scale_factor: float = Field(..., gt=0, description="Device pixel ratio")

    def as_playwright(self) -> dict:
        return {"width": self.width, "height": self.height}


class SectionRange(BaseModel):
    """Vertical pixel range of one heading-delimited section."""

    model_config = ConfigDict(frozen=True)

    title: str = Field("", description="Heading text")
    start_offset: int = Field(..., ge=0, description="Pixels from document top")
    end_offset: int = Field(..., description="Exclusive end offset")

    @model_validator(mode="after")
    def check_non_empty(self) -> "SectionRange":
        if self.end_offset <= self.start_offset:
            raise ValueError("Section end must be greater than its start")
        return self

    @property
    def height(self) -> int:
        return self.end_offset - self.start_offset


# Results
class Artifact(BaseModel):
    """One produced output file."""

    model_config = ConfigDict(frozen=True)

    path: Path = Field(..., description="Absolute file path")
    format: Union[OutputFormat, str] = Field(..., description="Output format or 'html' preview")
    section_index: Optional[int] = Field(None, ge=0, description="Zero-based section index")
    section: Optional[SectionRange] = Field(None, description="Captured section range")
    backend: str = Field(..., description="Backend that produced the artifact")

    @property
    def is_preview(self) -> bool:
        return self.format == PREVIEW_FORMAT
