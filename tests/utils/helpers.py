"""
Test Helpers
============

Helper functions for common testing operations.
"""

import io
from typing import Tuple

from PIL import Image  # type: ignore


def make_png(
    width: int = 40, height: int = 30, color: Tuple[int, ...] = (200, 30, 30, 255)
) -> bytes:
    """Create an in-memory RGBA PNG."""
    image = Image.new("RGBA", (width, height), color)
    output = io.BytesIO()
    image.save(output, format="PNG")
    return output.getvalue()


def image_size(data: bytes) -> Tuple[int, int]:
    """Return (width, height) of encoded image bytes."""
    with Image.open(io.BytesIO(data)) as image:
        return image.size


def two_heading_document() -> str:
    """A small document with two level-one headings and one diagram block."""
    return (
        "<!DOCTYPE html><html><head><title>Report</title></head><body>"
        "<h1>Introduction</h1><p>First part.</p>"
        '<pre><code class="language-mermaid">graph TD; A-->B;</code></pre>'
        "<h1>Details</h1><p>Second part.</p>"
        "</body></html>"
    )
