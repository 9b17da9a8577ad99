"""
Section Partitioner
===================

Splits a rendered document into heading-delimited vertical ranges and points
the page viewport at one range at a time for capture.
"""

from typing import Any, Dict, List, Sequence

from docshot.config.logging import get_logger
from docshot.core.rendering.viewport import measure_document
from docshot.models.schemas import SectionRange, ViewportSpec

logger = get_logger(__name__)

COLLECT_HEADINGS_JS = """
(elements) => elements.map((el) => {
  const rect = el.getBoundingClientRect();
  return {
    title: (el.textContent || '').trim(),
    top: rect.top + window.scrollY
  };
})
"""


def build_ranges(headings: Sequence[Dict[str, Any]], document_height: int) -> List[SectionRange]:
    """
    Turn heading offsets into contiguous ranges covering ``[0, document_height)``.

    The first range starts at 0 so content above the first heading is kept.
    Headings sharing an offset with the previous one, or lying at or past the
    document end, are folded into the previous range.

    Args:
        headings: ``{"title": str, "top": number}`` entries in document order
        document_height: Total document height in CSS pixels

    Returns:
        Ordered SectionRange list, empty when there are no headings
    """
    if not headings or document_height <= 0:
        return []

    starts: List[int] = []
    titles: List[str] = []
    for heading in sorted(headings, key=lambda h: float(h.get("top", 0))):
        top = max(0, int(heading.get("top", 0)))
        title = str(heading.get("title") or "")
        if not starts:
            starts.append(0)
            titles.append(title)
            continue
        if top <= starts[-1] or top >= document_height:
            logger.debug("Folding heading into previous section", title=title, top=top)
            continue
        starts.append(top)
        titles.append(title)

    ends = starts[1:] + [document_height]
    return [
        SectionRange(title=title, start_offset=start, end_offset=end)
        for title, start, end in zip(titles, starts, ends)
    ]


async def partition(page: Any, selector: str) -> List[SectionRange]:
    """
    Discover the sections of a loaded page.

    Returns an empty list when nothing matches ``selector``.
    """
    headings = await page.eval_on_selector_all(selector, COLLECT_HEADINGS_JS)
    if not headings:
        logger.info("No section headings matched", selector=selector)
        return []

    _, document_height = await measure_document(page)
    ranges = build_ranges(headings, document_height)

    logger.info(
        "Document partitioned",
        selector=selector,
        headings=len(headings),
        sections=len(ranges),
        document_height=document_height,
    )
    return ranges


async def focus_section(
    page: Any,
    section: SectionRange,
    base_viewport: ViewportSpec,
    padding: int,
    settle_millis: int,
) -> ViewportSpec:
    """
    Resize the viewport to one section and scroll it into place.

    The caller then captures the viewport only, so siblings above and below
    are not captured again.
    """
    viewport = ViewportSpec(
        width=base_viewport.width,
        height=section.height + padding,
        device_scale_factor=base_viewport.device_scale_factor,
    )
    await page.set_viewport_size(viewport.as_playwright())
    await page.evaluate("(top) => window.scrollTo(0, top)", section.start_offset)
    if settle_millis:
        await page.wait_for_timeout(settle_millis)
    return viewport
