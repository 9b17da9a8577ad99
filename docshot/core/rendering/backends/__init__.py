"""
Rendering Backends
==================

Registry of backend adapters, each exposing the CaptureSession contract.

Backends:
- playwright: headless Chromium (primary)
- weasyprint: WeasyPrint paged-media renderer (secondary)
"""

from typing import Dict, List, Optional, Type

from docshot.config.logging import get_logger
from docshot.config.settings import Settings, get_settings
from docshot.core.rendering.backends.base import CaptureSession, RenderBackend
from docshot.core.rendering.backends.playwright_backend import PlaywrightBackend
from docshot.core.rendering.backends.weasyprint_backend import WeasyPrintBackend

logger = get_logger(__name__)

BACKEND_REGISTRY: Dict[str, Type[RenderBackend]] = {
    PlaywrightBackend.name: PlaywrightBackend,
    WeasyPrintBackend.name: WeasyPrintBackend,
}


def create_backends(settings: Optional[Settings] = None) -> List[RenderBackend]:
    """
    Instantiate backends in the configured priority order.

    Unknown names are logged and skipped.
    """
    settings = settings or get_settings()
    backends: List[RenderBackend] = []
    for name in settings.backend_order:
        backend_cls = BACKEND_REGISTRY.get(name.lower())
        if backend_cls is None:
            logger.warning("Unknown backend in configuration", backend=name)
            continue
        backends.append(backend_cls(settings))
    return backends


__all__ = [
    "BACKEND_REGISTRY",
    "CaptureSession",
    "PlaywrightBackend",
    "RenderBackend",
    "WeasyPrintBackend",
    "create_backends",
]
