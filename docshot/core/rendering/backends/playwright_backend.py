"""
Playwright Backend
==================

Primary backend: headless Chromium driven through Playwright. Supports live
page measurement, section capture and every output format.
"""

from contextlib import asynccontextmanager
from types import ModuleType
from typing import Any, AsyncIterator, List, Optional

from docshot.config.logging import get_logger
from docshot.config.settings import Settings, get_settings
from docshot.core.rendering import sections, viewport as viewport_resolver
from docshot.core.rendering.backends.base import CaptureSession, RenderBackend
from docshot.core.rendering.encoding import transcode
from docshot.core.rendering.errors import BackendUnavailable
from docshot.core.rendering.prober import safe_import
from docshot.models.schemas import (
    BackendKind,
    OutputFormat,
    RenderRequest,
    SectionRange,
    ViewportSpec,
)

logger = get_logger(__name__)


class PlaywrightSession(CaptureSession):
    """A single Chromium page holding one document."""

    live_page = True

    def __init__(
        self,
        page: Any,
        html: str,
        request: RenderRequest,
        base_viewport: ViewportSpec,
        settings: Settings,
    ):
        self.page = page
        self.html = html
        self.request = request
        self.settings = settings
        self._base_viewport = base_viewport
        self._settled = False
        self.logger: Any = logger.bind(backend="playwright")  # structlog.BoundLoggerBase

    @property
    def base_viewport(self) -> ViewportSpec:
        return self._base_viewport

    async def load(self) -> None:
        await self.page.set_content(self.html, wait_until="domcontentloaded")
        self.logger.debug("Document loaded", html_length=len(self.html))

    async def _settle(self) -> None:
        """Wait for network idle and the request's settle delay, once."""
        if self._settled:
            return
        await self.page.wait_for_load_state("networkidle")
        if self.request.wait_millis:
            await self.page.wait_for_timeout(self.request.wait_millis)
        self._settled = True

    async def resolve_viewport(self, auto_size: bool) -> ViewportSpec:
        if auto_size:
            resolved = await viewport_resolver.resolve_auto_size(
                self.page,
                scale=self.request.scale,
                wait_millis=0 if self._settled else self.request.wait_millis,
                reflow_settle_millis=self.settings.reflow_settle_millis,
            )
            self._settled = True
            return resolved

        await self._settle()
        await self.page.set_viewport_size(self._base_viewport.as_playwright())
        if self.settings.reflow_settle_millis:
            await self.page.wait_for_timeout(self.settings.reflow_settle_millis)
        return self._base_viewport

    async def partition(self, selector: str) -> List[SectionRange]:
        await self._settle()
        return await sections.partition(self.page, selector)

    async def focus_section(self, section: SectionRange, viewport: ViewportSpec) -> ViewportSpec:
        return await sections.focus_section(
            self.page,
            section,
            viewport,
            padding=self.settings.section_padding,
            settle_millis=self.settings.scroll_settle_millis,
        )

    async def capture(
        self, fmt: OutputFormat, viewport: ViewportSpec, full_page: bool = True
    ) -> bytes:
        """
        Capture the page in one format.

        PNG and JPEG come straight from Chromium. Whole-document PDF uses the
        print pipeline sized to the document; WebP and section PDFs are
        transcoded from a PNG screenshot.
        """
        transparent = self.request.transparent_background

        if fmt is OutputFormat.PDF and full_page:
            width, height = await viewport_resolver.measure_document(self.page)
            return await self.page.pdf(
                width=f"{max(width, viewport.width)}px",
                height=f"{height}px",
                print_background=not transparent,
                page_ranges="1",
            )

        screenshot_options: dict = {
            "type": "jpeg" if fmt is OutputFormat.JPEG else "png",
            "full_page": full_page,
            "timeout": self.request.timeout_millis,
        }
        if fmt is OutputFormat.JPEG:
            screenshot_options["quality"] = self.request.quality
        elif transparent:
            screenshot_options["omit_background"] = True

        data = await self.page.screenshot(**screenshot_options)

        if fmt in (OutputFormat.WEBP, OutputFormat.PDF):
            data = transcode(data, fmt, self.request.quality, transparent)
        return data


class PlaywrightBackend(RenderBackend):
    """Headless Chromium via Playwright."""

    name = "playwright"
    kind = BackendKind.PRIMARY
    required_modules = ("playwright.async_api",)

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.logger: Any = logger.bind(backend=self.name)  # structlog.BoundLoggerBase

    def _load_async_api(self) -> ModuleType:
        probe = safe_import("playwright.async_api")
        if probe.module is None:
            raise BackendUnavailable(self.name, probe.error or "not installed")
        return probe.module

    @asynccontextmanager
    async def session(self, html: str, request: RenderRequest) -> AsyncIterator[PlaywrightSession]:
        async_api = self._load_async_api()

        try:
            playwright = await async_api.async_playwright().start()
        except Exception as e:
            raise BackendUnavailable(self.name, f"cannot start Playwright: {e}") from e

        browser = None
        try:
            try:
                browser = await playwright.chromium.launch(
                    headless=self.settings.playwright_headless,
                    args=list(self.settings.chromium_args),
                )
            except Exception as e:
                raise BackendUnavailable(self.name, f"cannot launch Chromium: {e}") from e

            base_viewport = viewport_resolver.resolve_fixed(request, self.settings)
            context = await browser.new_context(
                viewport=base_viewport.as_playwright(),
                device_scale_factor=base_viewport.device_scale_factor,
            )
            page = await context.new_page()
            page.set_default_timeout(request.timeout_millis)

            self.logger.info(
                "Browser session opened",
                width=base_viewport.width,
                height=base_viewport.height,
                scale=base_viewport.device_scale_factor,
            )
            yield PlaywrightSession(page, html, request, base_viewport, self.settings)

        finally:
            if browser is not None:
                try:
                    await browser.close()
                except Exception as e:
                    self.logger.warning("Browser close failed", error=str(e))
            try:
                await playwright.stop()
            except Exception as e:
                self.logger.warning("Playwright stop failed", error=str(e))
            self.logger.info("Browser session closed")
