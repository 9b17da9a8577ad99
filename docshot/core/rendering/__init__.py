"""
Rendering Module
===============

HTML to image/PDF rendering with backend fallback.

Components:
- prober: backend capability probing
- instrumentor: diagram bootstrap injection
- viewport: fixed and content-measured viewports
- sections: heading-delimited section ranges and capture focus
- naming: artifact file names
- preview: printable HTML fallback
- orchestrator: the pipeline coordinator
"""

from docshot.core.rendering.orchestrator import RenderOrchestrator, render_document

__all__ = ["RenderOrchestrator", "render_document"]
