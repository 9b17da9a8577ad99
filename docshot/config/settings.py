"""
Application Settings
===================

Rendering defaults and environment configuration using Pydantic Settings.
Every value can be overridden with a ``DOCSHOT_`` prefixed environment variable.
"""

from typing import Optional, List, Union
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from pathlib import Path


class Settings(BaseSettings):
    """Main application settings with environment variable support."""

    # Application Configuration
    app_name: str = Field(default="docshot", description="Application name")
    environment: str = Field(
        default="development", description="Environment: development, testing, production"
    )

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Logging level")
    log_file: Optional[Path] = Field(default=None, description="Optional rotating log file")

    # Rendering Defaults
    default_width: int = Field(default=1200, gt=0, description="Fixed viewport width")
    default_height: int = Field(default=800, gt=0, description="Fixed viewport height")
    default_scale: float = Field(default=2.0, gt=0, description="Device scale factor")
    default_quality: int = Field(default=90, ge=0, le=100, description="Lossy image quality")
    default_format: str = Field(default="png", description="Primary output format")
    default_wait_millis: int = Field(
        default=5000, ge=0, description="Settle delay after network idle"
    )
    default_timeout_millis: int = Field(
        default=60000, gt=0, description="Timeout per capture operation"
    )
    default_max_height: int = Field(
        default=15000, gt=0, description="Auto-size height that triggers section splitting"
    )
    default_section_selector: str = Field(default="h1, h2, h3", description="Section headings")
    default_template_id: str = Field(default="default", description="Template identifier")

    # Capture Timing
    section_padding: int = Field(default=100, ge=0, description="Extra pixels per section")
    scroll_settle_millis: int = Field(default=500, ge=0, description="Delay after scrolling")
    reflow_settle_millis: int = Field(default=2000, ge=0, description="Delay after resizing")

    # Browser Configuration
    playwright_headless: bool = Field(default=True, description="Run browser in headless mode")
    chromium_args: List[str] = Field(
        default=["--no-sandbox", "--disable-setuid-sandbox", "--disable-dev-shm-usage"],
        description="Extra Chromium launch arguments",
    )

    # Backend Configuration
    backend_order: List[str] = Field(
        default=["playwright", "weasyprint"], description="Backends in priority order"
    )

    # Diagrams and Preview
    diagram_language: str = Field(default="mermaid", description="Diagram code block language")
    diagram_theme: str = Field(default="default", description="Diagram theme")
    preview_print_label: str = Field(default="打印为PDF", description="Preview print button label")

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment value."""
        allowed = {"development", "testing", "production"}
        if v not in allowed:
            raise ValueError(f"Environment must be one of: {allowed}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in allowed:
            raise ValueError(f"Log level must be one of: {allowed}")
        return v.upper()

    @field_validator("default_format")
    @classmethod
    def validate_default_format(cls, v: str) -> str:
        allowed = {"png", "jpeg", "webp", "pdf"}
        if v.lower() not in allowed:
            raise ValueError(f"Default format must be one of: {allowed}")
        return v.lower()

    @field_validator("chromium_args", "backend_order", mode="before")
    @classmethod
    def parse_list(cls, v: Union[str, List[str]]) -> List[str]:
        """Parse comma-separated strings from the environment."""
        if isinstance(v, str):
            return [item.strip() for item in v.split(",") if item.strip()]
        return v

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, env_prefix="DOCSHOT_"
    )


# Global settings instance - will be initialized when needed
settings = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global settings
    if settings is None:
        settings = Settings()
    return settings


def reload_settings() -> Settings:
    """Reload settings from environment."""
    global settings
    settings = Settings()
    return settings
