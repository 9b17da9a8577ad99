"""
docshot
=======

Render finished HTML documents into PNG, JPEG, WebP or PDF artifacts.

This package provides:
- A rendering pipeline that tries headless Chromium (Playwright) first,
  then WeasyPrint, then writes a printable HTML preview
- Content-measured viewports and per-section capture of long documents
- Deterministic, collision-avoiding artifact naming
- Multi-format fan-out of a single capture
"""

__version__ = "1.0.0"
__author__ = "docshot Team"
