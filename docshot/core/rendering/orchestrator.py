"""
Render Orchestrator
===================

Top-level coordinator of the rendering pipeline: tries backends in priority
order, resolves viewports or sections, fans captures out to every requested
format, and falls back to a printable HTML preview when no backend works.
"""

import asyncio
from pathlib import Path
from typing import Any, Awaitable, List, Optional, Tuple, TypeVar

from docshot.config.logging import get_logger
from docshot.config.settings import Settings, get_settings
from docshot.core.rendering.backends.base import CaptureSession, RenderBackend
from docshot.core.rendering.errors import CaptureTimeout, FatalIOFailure, FormatUnsupportedByBackend
from docshot.core.rendering.instrumentor import instrument
from docshot.core.rendering.naming import ArtifactNamer, get_namer
from docshot.core.rendering.preview import write_preview
from docshot.core.rendering.prober import CapabilityProber, get_prober
from docshot.models.schemas import (
    Artifact,
    OutputFormat,
    RenderRequest,
    SectionRange,
    ViewportSpec,
)

logger = get_logger(__name__)

T = TypeVar("T")


class RenderOrchestrator:
    """Runs one conversion per ``render`` call."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        prober: Optional[CapabilityProber] = None,
        namer: Optional[ArtifactNamer] = None,
    ):
        self.settings = settings or get_settings()
        self.prober = prober or get_prober()
        self.namer = namer or get_namer()
        self.logger: Any = logger.bind(component="render_orchestrator")  # structlog.BoundLoggerBase

    async def render(self, request: RenderRequest) -> List[Artifact]:
        """
        Render the request's source document into artifacts.

        Args:
            request: Source document and rendering directives

        Returns:
            Non-empty, ordered list of produced artifacts

        Raises:
            FatalIOFailure: If an output file cannot be written
        """
        html = request.source_document
        output_dir = self._ensure_output_directory(request.output_directory)

        self.logger.info(
            "Render started",
            html_length=len(html),
            formats=[fmt.value for fmt in request.formats],
            split=request.split_into_sections,
            output_dir=str(output_dir),
        )

        for backend in self.prober.iter_available():
            try:
                artifacts = await self._render_with_backend(backend, html, request, output_dir)
            except FatalIOFailure:
                raise
            except Exception as e:
                self.logger.warning(
                    "Backend failed, trying next",
                    backend=backend.name,
                    error_type=type(e).__name__,
                    error=str(e),
                )
                continue

            if artifacts:
                self.logger.info(
                    "Render completed",
                    backend=backend.name,
                    artifacts=[str(artifact.path) for artifact in artifacts],
                )
                return artifacts

        self.logger.warning("No backend produced an image, writing HTML preview")
        return [
            write_preview(
                html,
                request,
                output_dir,
                self.namer,
                print_label=self.settings.preview_print_label,
            )
        ]

    def _ensure_output_directory(self, directory: Path) -> Path:
        """Create the output directory, retargeting to its parent when that fails."""
        target = Path(directory).expanduser()
        try:
            target.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            parent = target.absolute().parent
            self.logger.warning(
                "Cannot create output directory, using parent",
                directory=str(target),
                parent=str(parent),
                error=str(e),
            )
            return parent.resolve()
        return target.resolve()

    async def _bounded(self, awaitable: Awaitable[T], request: RenderRequest, operation: str) -> T:
        """Await one backend round trip under the request timeout."""
        try:
            return await asyncio.wait_for(awaitable, timeout=request.timeout_millis / 1000)
        except asyncio.TimeoutError as e:
            raise CaptureTimeout(operation, request.timeout_millis) from e

    async def _render_with_backend(
        self, backend: RenderBackend, html: str, request: RenderRequest, output_dir: Path
    ) -> List[Artifact]:
        document = instrument(html, self.settings.diagram_language, self.settings.diagram_theme)

        async with backend.session(document, request) as session:
            await self._bounded(session.load(), request, "load")

            if request.split_into_sections and session.live_page:
                ranges = await self._partition(session, request)
                if ranges:
                    artifacts = await self._capture_sections(
                        backend, session, ranges, session.base_viewport, request, output_dir
                    )
                    if artifacts:
                        return artifacts

            # Sectioning that degrades always falls back to auto-size
            auto_size = request.wants_auto_size or request.split_into_sections
            viewport = await self._bounded(
                session.resolve_viewport(auto_size), request, "resolve viewport"
            )

            if (
                auto_size
                and not request.split_into_sections
                and session.live_page
                and viewport.height > request.max_height
            ):
                self.logger.info(
                    "Document exceeds max height, splitting into sections",
                    height=viewport.height,
                    max_height=request.max_height,
                )
                ranges = await self._partition(session, request)
                if ranges:
                    artifacts = await self._capture_sections(
                        backend, session, ranges, viewport, request, output_dir
                    )
                    if artifacts:
                        return artifacts
                    viewport = await self._bounded(
                        session.resolve_viewport(True), request, "resolve viewport"
                    )

            timestamp = self.namer.batch_timestamp()
            return await self._capture_formats(
                backend, session, viewport, request, output_dir, timestamp, full_page=True
            )

    async def _partition(self, session: CaptureSession, request: RenderRequest) -> List[SectionRange]:
        """Partition the document, degrading to an empty result on failure."""
        try:
            ranges = await self._bounded(
                session.partition(request.section_selector), request, "partition"
            )
        except Exception as e:
            self.logger.warning(
                "Partitioning failed, capturing whole document",
                selector=request.section_selector,
                error_type=type(e).__name__,
                error=str(e),
            )
            return []

        if not ranges:
            self.logger.info(
                "No sections found, capturing whole document", selector=request.section_selector
            )
        return ranges

    async def _capture_sections(
        self,
        backend: RenderBackend,
        session: CaptureSession,
        ranges: List[SectionRange],
        base_viewport: ViewportSpec,
        request: RenderRequest,
        output_dir: Path,
    ) -> List[Artifact]:
        """
        Capture every section in order against the single shared page.

        A failing section discards the section files already written and
        returns an empty list so the caller captures the whole document.
        """
        timestamp = self.namer.batch_timestamp()
        artifacts: List[Artifact] = []

        try:
            for index, section in enumerate(ranges):
                viewport = await self._bounded(
                    session.focus_section(section, base_viewport),
                    request,
                    f"focus section {index + 1}",
                )
                artifacts.extend(
                    await self._capture_formats(
                        backend,
                        session,
                        viewport,
                        request,
                        output_dir,
                        timestamp,
                        full_page=False,
                        section_index=index,
                        section=section,
                    )
                )
                self.logger.info(
                    "Section captured",
                    index=index + 1,
                    total=len(ranges),
                    title=section.title,
                    start=section.start_offset,
                    end=section.end_offset,
                )
        except FatalIOFailure:
            raise
        except Exception as e:
            self.logger.warning(
                "Section capture failed, capturing whole document",
                backend=backend.name,
                captured=len(artifacts),
                error_type=type(e).__name__,
                error=str(e),
            )
            self._discard(artifacts)
            return []

        return artifacts

    def _discard(self, artifacts: List[Artifact]) -> None:
        """Remove files of a batch that will not be returned."""
        for artifact in artifacts:
            try:
                artifact.path.unlink(missing_ok=True)
            except OSError as e:
                self.logger.warning(
                    "Cannot remove partial artifact", path=str(artifact.path), error=str(e)
                )

    async def _capture_formats(
        self,
        backend: RenderBackend,
        session: CaptureSession,
        viewport: ViewportSpec,
        request: RenderRequest,
        output_dir: Path,
        timestamp: int,
        full_page: bool,
        section_index: Optional[int] = None,
        section: Optional[SectionRange] = None,
    ) -> List[Artifact]:
        """
        Capture the primary format, then each extra format.

        A primary-format failure propagates so the caller can fall back to
        the next backend; extra-format failures are logged and skipped.
        """
        artifacts: List[Artifact] = []
        produced: set = set()

        for position, fmt in enumerate(request.formats):
            if fmt in produced:
                continue
            is_primary = position == 0

            try:
                data, captured_format = await self._capture_one(
                    session, fmt, viewport, request, full_page, allow_substitute=is_primary
                )
            except Exception as e:
                if is_primary:
                    raise
                self.logger.warning(
                    "Extra format skipped",
                    backend=backend.name,
                    format=fmt.value,
                    section=section_index,
                    error_type=type(e).__name__,
                    error=str(e),
                )
                continue

            file_name = self.namer.name(
                request.template_id,
                captured_format,
                timestamp,
                prefix=request.file_name_prefix,
                section_index=section_index,
            )
            artifacts.append(
                self._write_artifact(
                    output_dir / file_name,
                    data,
                    captured_format,
                    backend,
                    section_index=section_index,
                    section=section,
                )
            )
            produced.add(captured_format)

        return artifacts

    async def _capture_one(
        self,
        session: CaptureSession,
        fmt: OutputFormat,
        viewport: ViewportSpec,
        request: RenderRequest,
        full_page: bool,
        allow_substitute: bool,
    ) -> Tuple[bytes, OutputFormat]:
        try:
            data = await self._bounded(
                session.capture(fmt, viewport, full_page=full_page), request, f"capture {fmt.value}"
            )
            return data, fmt
        except FormatUnsupportedByBackend as e:
            if not allow_substitute or fmt is OutputFormat.PDF:
                raise
            self.logger.warning(
                "Primary format unsupported, substituting PDF", format=fmt.value, error=str(e)
            )

        data = await self._bounded(
            session.capture(OutputFormat.PDF, viewport, full_page=full_page), request, "capture pdf"
        )
        return data, OutputFormat.PDF

    def _write_artifact(
        self,
        path: Path,
        data: bytes,
        fmt: OutputFormat,
        backend: RenderBackend,
        section_index: Optional[int] = None,
        section: Optional[SectionRange] = None,
    ) -> Artifact:
        """
        Persist one artifact.

        Raises:
            FatalIOFailure: If the file cannot be written
        """
        try:
            path.write_bytes(data)
        except OSError as e:
            self.logger.error("Artifact write failed", path=str(path), error=str(e))
            raise FatalIOFailure(str(path), str(e)) from e

        self.logger.info("Artifact written", path=str(path), format=fmt.value, size=len(data))
        return Artifact(
            path=path,
            format=fmt,
            section_index=section_index,
            section=section,
            backend=backend.name,
        )


async def render_document(
    request: RenderRequest, orchestrator: Optional[RenderOrchestrator] = None
) -> List[str]:
    """
    Render a document and return the absolute paths of the produced files.

    This is the surface consumed by CLI and batch collaborators.
    """
    orchestrator = orchestrator or RenderOrchestrator()
    artifacts = await orchestrator.render(request)
    return [str(artifact.path) for artifact in artifacts]
