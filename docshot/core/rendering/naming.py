"""
Artifact Naming
===============

Deterministic artifact file names built from a prefix, the template id, an
optional section index and a per-batch millisecond timestamp.
"""

import threading
import time
from typing import Optional, Union

from docshot.models.schemas import OutputFormat, PREVIEW_FORMAT


class ArtifactNamer:
    """Builds artifact file names and hands out batch timestamps."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._last_timestamp = 0

    def batch_timestamp(self) -> int:
        """
        Millisecond epoch time for a new artifact batch.

        Strictly increasing within the process, so two batches started in the
        same millisecond still get distinct names.
        """
        now = time.time_ns() // 1_000_000
        with self._lock:
            if now <= self._last_timestamp:
                now = self._last_timestamp + 1
            self._last_timestamp = now
        return now

    @staticmethod
    def effective_prefix(template_id: str, prefix: Optional[str] = None) -> str:
        return f"{prefix}_{template_id}" if prefix else template_id

    def name(
        self,
        template_id: str,
        fmt: Union[OutputFormat, str],
        timestamp: int,
        prefix: Optional[str] = None,
        section_index: Optional[int] = None,
    ) -> str:
        """Return ``{prefix}_{sectionN_}{timestamp}.{ext}``."""
        extension = fmt.value if isinstance(fmt, OutputFormat) else fmt
        section_label = f"section{section_index + 1}_" if section_index is not None else ""
        return (
            f"{self.effective_prefix(template_id, prefix)}_{section_label}{timestamp}.{extension}"
        )

    def preview_name(self, template_id: str, timestamp: int, prefix: Optional[str] = None) -> str:
        return f"{self.effective_prefix(template_id, prefix)}_preview_{timestamp}.{PREVIEW_FORMAT}"


# Process-wide namer so concurrent orchestrators share one monotonic clock
_global_namer: Optional[ArtifactNamer] = None


def get_namer() -> ArtifactNamer:
    """Get the process-wide artifact namer."""
    global _global_namer
    if _global_namer is None:
        _global_namer = ArtifactNamer()
    return _global_namer
