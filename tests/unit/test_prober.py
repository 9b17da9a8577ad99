"""
Unit Tests for the Capability Prober
====================================
"""

from docshot.core.rendering.prober import CapabilityProber, get_prober, reset_prober, safe_import
from docshot.models.schemas import BackendCapability

from tests.utils.mocks import FakeBackend, unavailable_backend


class TestSafeImport:
    """Test guarded imports."""

    def test_available_module(self):
        probe = safe_import("json")

        assert probe.available
        assert probe.module.__name__ == "json"
        assert probe.error is None

    def test_missing_module(self):
        probe = safe_import("docshot_missing_module_xyz")

        assert not probe.available
        assert "ModuleNotFoundError" in probe.error


class TestCapabilityProber:
    """Test lazy, cached probing."""

    def test_initial_snapshot_untested(self):
        prober = CapabilityProber(backends=[FakeBackend(name="a"), FakeBackend(name="b")])

        assert prober.snapshot() == {
            "a": BackendCapability.UNTESTED,
            "b": BackendCapability.UNTESTED,
        }

    def test_capability_cached(self):
        backend = FakeBackend()
        prober = CapabilityProber(backends=[backend])

        assert prober.capability(backend) is BackendCapability.AVAILABLE
        assert prober.capability(backend) is BackendCapability.AVAILABLE
        assert backend.probe_count == 1

    def test_force_reprobes(self):
        backend = FakeBackend()
        prober = CapabilityProber(backends=[backend])

        prober.capability(backend)
        prober.capability(backend, force=True)

        assert backend.probe_count == 2

    def test_iter_available_is_lazy(self):
        first, second = FakeBackend(name="first"), FakeBackend(name="second")
        prober = CapabilityProber(backends=[first, second])

        iterator = prober.iter_available()
        assert next(iterator) is first

        assert second.probe_count == 0
        assert prober.snapshot()["second"] is BackendCapability.UNTESTED

    def test_iter_available_skips_missing(self):
        missing = unavailable_backend("missing")
        present = FakeBackend(name="present")
        prober = CapabilityProber(backends=[missing, present])

        assert list(prober.iter_available()) == [present]
        assert prober.snapshot()["missing"] is BackendCapability.UNAVAILABLE

    def test_no_backends_available(self):
        prober = CapabilityProber(backends=[unavailable_backend("a")])

        assert list(prober.iter_available()) == []


def test_default_prober_uses_configured_backends():
    reset_prober()
    try:
        prober = get_prober()
        assert prober is get_prober()
        assert [backend.name for backend in prober.backends] == ["playwright", "weasyprint"]
    finally:
        reset_prober()
