"""
Preview Fallback
================

Writes a standalone HTML preview with print styling and a print button. Used
when no image-capable backend is available; performs no browser automation.
"""

import re
from pathlib import Path
from typing import Optional

from docshot.config.logging import get_logger
from docshot.core.rendering.errors import FatalIOFailure
from docshot.core.rendering.naming import ArtifactNamer
from docshot.core.rendering.templating import render_fragment
from docshot.models.schemas import Artifact, RenderRequest, PREVIEW_FORMAT

logger = get_logger(__name__)

PREVIEW_BACKEND = "preview"
DEFAULT_PRINT_LABEL = "打印为PDF"
DEFAULT_HINT = (
    "提示: 您可以使用浏览器的打印功能将此页面保存为PDF或图片。"
    '点击右上角的"打印"按钮，或按Ctrl+P (Windows) / Cmd+P (Mac)。'
)

_HEAD_CLOSE = re.compile(r"</head\s*>", re.IGNORECASE)
_BODY_OPEN = re.compile(r"<body\b[^>]*>", re.IGNORECASE)


def build_preview(
    html: str, print_label: str = DEFAULT_PRINT_LABEL, hint: str = DEFAULT_HINT
) -> str:
    """
    Add print styles and a print trigger to a document.

    Styles go before ``</head>``, the button and hint right after the opening
    ``<body>`` tag. Fragments without either tag are wrapped in a complete
    document so the result always opens standalone.
    """
    head = render_fragment("preview_head.html")
    controls = render_fragment("preview_controls.html", print_label=print_label, hint=hint)

    head_close = _HEAD_CLOSE.search(html)
    body_open = _BODY_OPEN.search(html)

    if head_close is None and body_open is None:
        return (
            "<!DOCTYPE html>\n<html>\n<head>\n<meta charset=\"utf-8\">\n"
            f"{head}</head>\n<body>\n{controls}{html}\n</body>\n</html>\n"
        )

    if body_open is not None:
        html = html[: body_open.end()] + controls + html[body_open.end():]
    else:
        head_end = _HEAD_CLOSE.search(html)
        html = html[: head_end.end()] + controls + html[head_end.end():]

    head_close = _HEAD_CLOSE.search(html)
    if head_close is not None:
        return html[: head_close.start()] + head + html[head_close.start():]

    body_open = _BODY_OPEN.search(html)
    return html[: body_open.start()] + head + html[body_open.start():]


def write_preview(
    html: str,
    request: RenderRequest,
    output_dir: Path,
    namer: ArtifactNamer,
    print_label: Optional[str] = None,
) -> Artifact:
    """
    Write the preview file for a request.

    Raises:
        FatalIOFailure: If the preview cannot be written
    """
    timestamp = namer.batch_timestamp()
    file_name = namer.preview_name(request.template_id, timestamp, request.file_name_prefix)
    output_path = (output_dir / file_name).resolve()

    document = build_preview(html, print_label or DEFAULT_PRINT_LABEL)

    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(document, encoding="utf-8")
    except OSError as e:
        logger.error("Preview write failed", path=str(output_path), error=str(e))
        raise FatalIOFailure(str(output_path), str(e)) from e

    logger.info("Preview written", path=str(output_path), size=len(document))
    return Artifact(path=output_path, format=PREVIEW_FORMAT, backend=PREVIEW_BACKEND)
