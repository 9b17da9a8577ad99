"""
Capability Prober
=================

Decides at call time which rendering backends can run. Missing optional
libraries are an expected outcome and are reported, never raised.
"""

import importlib
from dataclasses import dataclass
from types import ModuleType
from typing import TYPE_CHECKING, Dict, Iterable, Iterator, List, Optional

from docshot.config.logging import get_logger
from docshot.config.settings import Settings
from docshot.models.schemas import BackendCapability

if TYPE_CHECKING:
    from docshot.core.rendering.backends.base import RenderBackend

logger = get_logger(__name__)


@dataclass(frozen=True)
class ImportProbe:
    """Outcome of a guarded module import."""

    module_name: str
    module: Optional[ModuleType] = None
    error: Optional[str] = None

    @property
    def available(self) -> bool:
        return self.module is not None


def safe_import(module_name: str) -> ImportProbe:
    """
    Import a module, turning absence into a tagged result.

    OSError is included because libraries with native dependencies (WeasyPrint
    and its Pango bindings) raise it when the shared libraries are missing.
    """
    try:
        module = importlib.import_module(module_name)
    except (ImportError, OSError) as e:
        return ImportProbe(module_name=module_name, error=f"{type(e).__name__}: {e}")
    return ImportProbe(module_name=module_name, module=module)


class CapabilityProber:
    """Probes backends lazily, in priority order, caching each result."""

    def __init__(
        self,
        backends: Optional[Iterable["RenderBackend"]] = None,
        settings: Optional[Settings] = None,
    ):
        if backends is None:
            from docshot.core.rendering.backends import create_backends

            backends = create_backends(settings)

        self.backends: List["RenderBackend"] = list(backends)
        self._cache: Dict[str, BackendCapability] = {
            backend.name: BackendCapability.UNTESTED for backend in self.backends
        }
        self.logger = logger.bind(component="capability_prober")

    def capability(self, backend: "RenderBackend", force: bool = False) -> BackendCapability:
        """Return the cached capability of a backend, probing it on first use."""
        cached = self._cache.get(backend.name, BackendCapability.UNTESTED)
        if cached is not BackendCapability.UNTESTED and not force:
            return cached

        result = backend.probe()
        self._cache[backend.name] = result
        self.logger.info(
            "Backend probed", backend=backend.name, kind=backend.kind.value, capability=result.value
        )
        return result

    def iter_available(self) -> Iterator["RenderBackend"]:
        """
        Yield available backends in priority order.

        Each backend is probed only when the consumer asks for it, so a render
        that succeeds on the first backend never probes the others.
        """
        found = False
        for backend in self.backends:
            if self.capability(backend) is BackendCapability.AVAILABLE:
                found = True
                yield backend

        if not found:
            self.logger.warning(
                "No rendering backend available",
                probed=[backend.name for backend in self.backends],
            )

    def snapshot(self) -> Dict[str, BackendCapability]:
        """Current cached capability per backend name."""
        return dict(self._cache)


# Process-wide prober so capabilities are resolved once per process
_global_prober: Optional[CapabilityProber] = None


def get_prober() -> CapabilityProber:
    """Get the process-wide capability prober."""
    global _global_prober
    if _global_prober is None:
        _global_prober = CapabilityProber()
    return _global_prober


def reset_prober() -> None:
    """Forget cached capabilities (next render probes again)."""
    global _global_prober
    _global_prober = None
