"""
Test Configuration
==================

Pytest configuration with fixtures shared by the unit tests.
"""

import os

os.environ.setdefault("DOCSHOT_ENVIRONMENT", "testing")

from pathlib import Path
from typing import Callable

import pytest

from docshot.config.settings import Settings
from docshot.core.rendering.naming import ArtifactNamer
from docshot.core.rendering.prober import CapabilityProber
from docshot.core.rendering.orchestrator import RenderOrchestrator
from docshot.models.schemas import RenderRequest

from tests.utils.helpers import two_heading_document


class TestSettings(Settings):
    """Test-specific settings: no settle delays, console logging only."""

    __test__ = False

    environment: str = "testing"
    log_level: str = "DEBUG"
    scroll_settle_millis: int = 0
    reflow_settle_millis: int = 0
    default_wait_millis: int = 0


@pytest.fixture
def test_settings() -> TestSettings:
    """Test settings fixture."""
    return TestSettings()


@pytest.fixture
def output_dir(tmp_path: Path) -> Path:
    """Directory receiving rendered artifacts."""
    return tmp_path / "images"


@pytest.fixture
def sample_html() -> str:
    return two_heading_document()


@pytest.fixture
def make_request(output_dir: Path, sample_html: str) -> Callable[..., RenderRequest]:
    """Factory building requests with fast timings and test defaults."""

    def _make(**overrides) -> RenderRequest:
        values = {
            "source_document": sample_html,
            "output_directory": output_dir,
            "wait_millis": 0,
            "timeout_millis": 2000,
            "template_id": "default",
        }
        values.update(overrides)
        return RenderRequest(**values)

    return _make


@pytest.fixture
def make_orchestrator(test_settings: TestSettings) -> Callable[..., RenderOrchestrator]:
    """Factory wiring an orchestrator to an explicit backend list."""

    def _make(*backends) -> RenderOrchestrator:
        return RenderOrchestrator(
            settings=test_settings,
            prober=CapabilityProber(backends=list(backends), settings=test_settings),
            namer=ArtifactNamer(),
        )

    return _make
