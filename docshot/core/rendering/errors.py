"""
Rendering Errors
================

Exception taxonomy for the rendering pipeline. Only FatalIOFailure reaches
callers; every other error is recovered inside the orchestrator.
"""

from typing import Optional


class RenderError(Exception):
    """Base class for rendering pipeline errors."""

    pass


class BackendUnavailable(RenderError):
    """A backend could not be loaded or launched."""

    def __init__(self, backend: str, reason: str):
        super().__init__(f"Backend '{backend}' unavailable: {reason}")
        self.backend = backend
        self.reason = reason


class CaptureError(RenderError):
    """A backend failed while loading the document or capturing it."""

    pass


class CaptureTimeout(CaptureError):
    """A single backend round trip exceeded the request timeout."""

    def __init__(self, operation: str, timeout_millis: int):
        super().__init__(f"{operation} timed out after {timeout_millis}ms")
        self.operation = operation
        self.timeout_millis = timeout_millis


class FormatUnsupportedByBackend(CaptureError):
    """The backend cannot produce the requested output format."""

    def __init__(self, backend: str, fmt: str, reason: Optional[str] = None):
        message = f"Backend '{backend}' cannot produce {fmt}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.backend = backend
        self.format = fmt


class FatalIOFailure(RenderError):
    """No output file could be written (disk full, permission denied)."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"Cannot write {path}: {reason}")
        self.path = path
        self.reason = reason
