"""
Backend Contract
================

Uniform capture interface implemented by every rendering backend adapter.
"""

from abc import ABC, abstractmethod
from typing import AsyncContextManager, List, Tuple

from docshot.config.logging import get_logger
from docshot.core.rendering.prober import safe_import
from docshot.models.schemas import (
    BackendCapability,
    BackendKind,
    OutputFormat,
    RenderRequest,
    SectionRange,
    ViewportSpec,
)

logger = get_logger(__name__)


class CaptureSession(ABC):
    """
    One loaded document inside a backend.

    The session owns the page handle; the orchestrator drives it strictly
    sequentially and never keeps it past the backend's context manager.
    """

    #: Whether the backend runs a live, scriptable page (measurement, sections)
    live_page: bool = False

    @property
    @abstractmethod
    def base_viewport(self) -> ViewportSpec:
        """Fixed viewport the document was loaded with."""

    @abstractmethod
    async def load(self) -> None:
        """Load the document."""

    @abstractmethod
    async def resolve_viewport(self, auto_size: bool) -> ViewportSpec:
        """Return the whole-document viewport, measuring the content if asked."""

    async def partition(self, selector: str) -> List[SectionRange]:
        """Heading-delimited sections of the document; empty when unsupported."""
        return []

    @abstractmethod
    async def focus_section(self, section: SectionRange, viewport: ViewportSpec) -> ViewportSpec:
        """
        Point a viewport of the given width at one section before a viewport-only capture.

        Only called when ``live_page`` is set; sessions without a live page
        raise CaptureError.
        """

    @abstractmethod
    async def capture(
        self, fmt: OutputFormat, viewport: ViewportSpec, full_page: bool = True
    ) -> bytes:
        """Capture the current document state in one output format."""


class RenderBackend(ABC):
    """A pluggable rendering engine."""

    name: str = ""
    kind: BackendKind = BackendKind.NONE
    required_modules: Tuple[str, ...] = ()

    def probe(self) -> BackendCapability:
        """Report whether every module the backend needs can be imported."""
        for module_name in self.required_modules:
            probe = safe_import(module_name)
            if not probe.available:
                logger.info(
                    "Backend module missing",
                    backend=self.name,
                    module=module_name,
                    error=probe.error,
                )
                return BackendCapability.UNAVAILABLE
        return BackendCapability.AVAILABLE

    @abstractmethod
    def session(self, html: str, request: RenderRequest) -> AsyncContextManager[CaptureSession]:
        """
        Open a capture session for one document.

        Resources acquired by the session are released when the context
        exits, on every path.
        """
