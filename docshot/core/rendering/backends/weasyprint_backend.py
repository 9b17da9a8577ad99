"""
WeasyPrint Backend
==================

Secondary backend: WeasyPrint lays the document out as paged media. PDF is
native; raster formats rasterise the PDF pages with PyMuPDF and stitch them.
There is no script engine, so no measurement and no sectioning.
"""

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional

from docshot.config.logging import get_logger
from docshot.config.settings import Settings, get_settings
from docshot.core.rendering import viewport as viewport_resolver
from docshot.core.rendering.backends.base import CaptureSession, RenderBackend
from docshot.core.rendering.encoding import stack_vertically, transcode
from docshot.core.rendering.errors import BackendUnavailable, CaptureError, FormatUnsupportedByBackend
from docshot.core.rendering.prober import safe_import
from docshot.models.schemas import BackendKind, OutputFormat, RenderRequest, SectionRange, ViewportSpec

logger = get_logger(__name__)

PAGE_CSS = "@page { size: A4; margin: 10mm; }"


class WeasyPrintSession(CaptureSession):
    """A WeasyPrint document rendered once and written per format."""

    live_page = False

    def __init__(self, weasyprint: Any, html: str, request: RenderRequest, settings: Settings):
        self.weasyprint = weasyprint
        self.html = html
        self.request = request
        self.settings = settings
        self._base_viewport = viewport_resolver.resolve_fixed(request, settings)
        self._pdf: Optional[bytes] = None
        self.logger: Any = logger.bind(backend="weasyprint")  # structlog.BoundLoggerBase

    @property
    def base_viewport(self) -> ViewportSpec:
        return self._base_viewport

    async def load(self) -> None:
        try:
            document = self.weasyprint.HTML(
                string=self.html, base_url=str(self.request.output_directory)
            )
            self._pdf = document.write_pdf(
                stylesheets=[self.weasyprint.CSS(string=PAGE_CSS)]
            )
        except Exception as e:
            raise CaptureError(f"WeasyPrint layout failed: {e}") from e
        self.logger.debug("Document laid out", pdf_size=len(self._pdf or b""))

    async def resolve_viewport(self, auto_size: bool) -> ViewportSpec:
        if auto_size:
            self.logger.debug("Auto-size not supported without a live page, using fixed viewport")
        return self._base_viewport

    async def focus_section(self, section: SectionRange, viewport: ViewportSpec) -> ViewportSpec:
        raise CaptureError("WeasyPrint has no live page to scroll to a section")

    async def capture(
        self, fmt: OutputFormat, viewport: ViewportSpec, full_page: bool = True
    ) -> bytes:
        if self._pdf is None:
            raise CaptureError("Document not loaded")

        if fmt is OutputFormat.PDF:
            return self._pdf

        probe = safe_import("fitz")
        if probe.module is None:
            raise FormatUnsupportedByBackend(
                "weasyprint", fmt.value, f"rasterising needs PyMuPDF ({probe.error})"
            )
        fitz = probe.module

        transparent = self.request.transparent_background
        zoom = viewport.device_scale_factor
        pages = []
        with fitz.open(stream=self._pdf, filetype="pdf") as pdf:
            for page in pdf:
                pixmap = page.get_pixmap(matrix=fitz.Matrix(zoom, zoom), alpha=transparent)
                pages.append(pixmap.tobytes("png"))

        if not pages:
            raise CaptureError("WeasyPrint produced an empty document")

        return transcode(stack_vertically(pages), fmt, self.request.quality, transparent)


class WeasyPrintBackend(RenderBackend):
    """HTML to PDF through WeasyPrint."""

    name = "weasyprint"
    kind = BackendKind.SECONDARY
    required_modules = ("weasyprint",)

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()

    @asynccontextmanager
    async def session(self, html: str, request: RenderRequest) -> AsyncIterator[WeasyPrintSession]:
        probe = safe_import("weasyprint")
        if probe.module is None:
            raise BackendUnavailable(self.name, probe.error or "not installed")
        yield WeasyPrintSession(probe.module, html, request, self.settings)
