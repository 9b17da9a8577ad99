"""
Viewport Resolver
=================

Computes capture viewports: caller-fixed dimensions, or dimensions measured
from the live page after it has settled.
"""

from typing import Any, Optional, Tuple

from docshot.config.logging import get_logger
from docshot.config.settings import Settings, get_settings
from docshot.models.schemas import RenderRequest, ViewportSpec

logger = get_logger(__name__)

# Max of scroll/offset/client extents over <html> and <body>, so both
# standards-mode and quirks-mode layouts report their full size.
MEASURE_DOCUMENT_JS = """
() => {
  const body = document.body || document.documentElement;
  const root = document.documentElement;
  return {
    width: Math.max(
      body.scrollWidth, root.scrollWidth,
      body.offsetWidth, root.offsetWidth,
      body.clientWidth, root.clientWidth
    ),
    height: Math.max(
      body.scrollHeight, root.scrollHeight,
      body.offsetHeight, root.offsetHeight,
      body.clientHeight, root.clientHeight
    )
  };
}
"""


def resolve_fixed(request: RenderRequest, settings: Optional[Settings] = None) -> ViewportSpec:
    """Echo the request's fixed dimensions, falling back to the configured defaults."""
    settings = settings or get_settings()
    return ViewportSpec(
        width=request.fixed_width or settings.default_width,
        height=request.fixed_height or settings.default_height,
        device_scale_factor=request.scale,
    )


async def measure_document(page: Any) -> Tuple[int, int]:
    """Return the full (width, height) of the rendered document in CSS pixels."""
    dimensions = await page.evaluate(MEASURE_DOCUMENT_JS)
    width = max(1, int(dimensions["width"]))
    height = max(1, int(dimensions["height"]))
    return width, height


async def resolve_auto_size(
    page: Any, scale: float, wait_millis: int, reflow_settle_millis: int
) -> ViewportSpec:
    """
    Size the viewport to the content of a loaded page.

    Waits for network idle and ``wait_millis`` so asynchronous diagram
    rendering can finish, measures the document, resizes the viewport and
    waits ``reflow_settle_millis`` for reflow.

    Args:
        page: Playwright page with the document loaded
        scale: Device scale factor the page's context was created with
        wait_millis: Settle delay before measuring
        reflow_settle_millis: Settle delay after resizing

    Returns:
        The applied ViewportSpec
    """
    await page.wait_for_load_state("networkidle")
    if wait_millis:
        await page.wait_for_timeout(wait_millis)

    width, height = await measure_document(page)
    viewport = ViewportSpec(width=width, height=height, device_scale_factor=scale)
    await page.set_viewport_size(viewport.as_playwright())

    if reflow_settle_millis:
        await page.wait_for_timeout(reflow_settle_millis)

    logger.info("Auto-size viewport resolved", width=width, height=height, scale=scale)
    return viewport
