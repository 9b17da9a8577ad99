"""
Content Instrumentor
====================

Injects the diagram bootstrap script so fenced diagram blocks are converted
to vector markup before any backend captures the page.
"""

import re

from docshot.config.logging import get_logger
from docshot.core.rendering.templating import render_fragment

logger = get_logger(__name__)

BOOTSTRAP_ATTRIBUTE = "data-docshot-bootstrap"
DIAGRAM_MARKER_CLASS = "docshot-diagram"

_BODY_CLOSE = re.compile(r"</body\s*>", re.IGNORECASE)
_LANGUAGE = re.compile(r"^[A-Za-z][A-Za-z0-9_-]*$")
_BOOTSTRAP_TAG = re.compile(
    r"<script\b[^>]*\b" + re.escape(BOOTSTRAP_ATTRIBUTE) + r"\b", re.IGNORECASE
)


def is_instrumented(html: str) -> bool:
    """Return True when the document already carries the bootstrap script."""
    return _BOOTSTRAP_TAG.search(html) is not None


def render_bootstrap(language: str = "mermaid", theme: str = "default") -> str:
    """Render the bootstrap ``<script>`` for one diagram language."""
    if not _LANGUAGE.match(language):
        raise ValueError(f"Invalid diagram language: {language!r}")
    return render_fragment(
        "diagram_bootstrap.html",
        attribute=BOOTSTRAP_ATTRIBUTE,
        library=language,
        language=language,
        theme=theme,
        marker=DIAGRAM_MARKER_CLASS,
    )


def instrument(html: str, language: str = "mermaid", theme: str = "default") -> str:
    """
    Insert the diagram bootstrap immediately before the closing body tag.

    Documents that are already instrumented are returned unchanged. Without a
    closing body tag the script is appended to the end of the document.

    Args:
        html: Finished HTML document
        language: Fenced code block language marking diagram blocks
        theme: Diagram library theme

    Returns:
        Instrumented HTML
    """
    if is_instrumented(html):
        logger.debug("Document already instrumented", html_length=len(html))
        return html

    script = render_bootstrap(language, theme)

    closing = None
    for closing in _BODY_CLOSE.finditer(html):
        pass

    if closing is None:
        logger.debug("No closing body tag, appending bootstrap", html_length=len(html))
        return html + script

    index = closing.start()
    return html[:index] + script + html[index:]
