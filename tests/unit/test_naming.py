"""
Unit Tests for Artifact Naming
==============================
"""

import re
import threading
from unittest.mock import patch

from docshot.core.rendering.naming import ArtifactNamer, get_namer
from docshot.models.schemas import OutputFormat


class TestArtifactNames:
    """Test file name composition."""

    def test_plain_name(self):
        namer = ArtifactNamer()

        assert namer.name("default", OutputFormat.PNG, 1700000000000) == "default_1700000000000.png"

    def test_prefix_precedes_template(self):
        namer = ArtifactNamer()

        name = namer.name("dark", OutputFormat.JPEG, 42, prefix="report")

        assert name == "report_dark_42.jpeg"

    def test_section_label_is_one_based(self):
        namer = ArtifactNamer()

        name = namer.name("default", OutputFormat.WEBP, 42, section_index=0)

        assert name == "default_section1_42.webp"

    def test_preview_name(self):
        namer = ArtifactNamer()

        assert namer.preview_name("default", 42, "weekly") == "weekly_default_preview_42.html"

    def test_effective_prefix(self):
        assert ArtifactNamer.effective_prefix("default") == "default"
        assert ArtifactNamer.effective_prefix("default", "") == "default"
        assert ArtifactNamer.effective_prefix("default", "周报") == "周报_default"


class TestBatchTimestamp:
    """Test the collision-free batch clock."""

    def test_timestamp_is_milliseconds(self):
        namer = ArtifactNamer()

        with patch("docshot.core.rendering.naming.time.time_ns", return_value=1_700_000_000_123_456_789):
            assert namer.batch_timestamp() == 1_700_000_000_123

    def test_same_millisecond_is_bumped(self):
        namer = ArtifactNamer()

        with patch("docshot.core.rendering.naming.time.time_ns", return_value=5_000_000):
            stamps = [namer.batch_timestamp() for _ in range(3)]

        assert stamps == [5, 6, 7]

    def test_concurrent_timestamps_are_unique(self):
        namer = ArtifactNamer()
        stamps = []
        lock = threading.Lock()

        def worker():
            for _ in range(50):
                value = namer.batch_timestamp()
                with lock:
                    stamps.append(value)

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(set(stamps)) == len(stamps) == 200

    def test_names_from_distinct_batches_differ(self):
        namer = ArtifactNamer()

        first = namer.name("default", OutputFormat.PNG, namer.batch_timestamp())
        second = namer.name("default", OutputFormat.PNG, namer.batch_timestamp())

        assert first != second
        assert re.fullmatch(r"default_\d+\.png", first)


def test_get_namer_is_process_wide():
    assert get_namer() is get_namer()
