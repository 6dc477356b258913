"""Tests for the probe feature."""

import pytest
from fastapi import FastAPI

from healthprobe.core.config import ProbeSettings
from healthprobe.probe import HealthProbe, install


async def async_true() -> bool:
    return True


class TestHealthProbe:
    """Tests for HealthProbe configuration."""

    def test_defaults(self):
        """Test default endpoint configs."""
        probe = HealthProbe(settings=ProbeSettings())

        assert probe.health.path == "/health"
        assert probe.ready.path == "/ready"
        assert probe.health.checks == ()
        assert probe.installed is False

    def test_configure_overrides(self):
        """Test settings overrides are validated."""
        probe = HealthProbe.configure(ready_check_path="newready", successful_check_status_code=202)

        assert probe.ready.path == "/newready"
        assert probe.aggregator.successful_status_code == 202

    def test_configure_merges_settings(self):
        """Test overrides apply on top of given settings."""
        base = ProbeSettings(health_check_path="alive")

        probe = HealthProbe.configure(settings=base, ready_check_enabled=False)

        assert probe.health.path == "/alive"
        assert probe.ready.enabled is False

    def test_blocks_replace_checks(self):
        """Test each block replaces the endpoint's collection."""
        probe = HealthProbe(settings=ProbeSettings())
        probe.health_checks(lambda c: c.check("db", async_true))
        probe.health_checks(lambda c: c.check("cache", async_true))

        assert [c.name for c in probe.health.checks] == ["cache"]

    def test_health_and_ready_independent(self):
        """Test the two endpoints keep separate checks."""
        probe = HealthProbe(settings=ProbeSettings())
        probe.health_checks(lambda c: c.check("cache", async_true))
        probe.ready_checks(lambda c: c.check("db", async_true))

        assert [c.name for c in probe.health.checks] == ["cache"]
        assert [c.name for c in probe.ready.checks] == ["db"]

    def test_separate_instances(self):
        """Test probes do not share checks."""
        first = HealthProbe(settings=ProbeSettings())
        second = HealthProbe(settings=ProbeSettings())
        first.ready_checks(lambda c: c.check("db", async_true))

        assert second.ready.checks == ()

    @pytest.mark.asyncio
    async def test_dispatch(self):
        """Test dispatch through the probe."""
        probe = HealthProbe(settings=ProbeSettings())
        probe.ready_checks(lambda c: c.check("db", async_true))

        decision = await probe.dispatch("/ready")

        assert decision.body == '{"db":true}'
        assert await probe.dispatch("/other") is None


class TestInstall:
    """Tests for installing the probe."""

    def test_install_registers_state(self):
        """Test the probe is reachable from the app."""
        app = FastAPI()

        probe = install(app, settings=ProbeSettings())

        assert app.state.health_probe is probe
        assert probe.installed is True
        assert probe.resolve("/health") is not None
        assert probe.resolve("/ready") is not None

    def test_install_runs_configure(self):
        """Test configure callback runs before install."""
        app = FastAPI()

        def configure(probe: HealthProbe) -> None:
            probe.ready_checks(lambda c: c.check("db", async_true))

        probe = install(app, configure=configure, settings=ProbeSettings())

        assert [c.name for c in probe.ready.checks] == ["db"]

    def test_disabled_endpoint_not_routed(self):
        """Test disabled endpoints are not served."""
        probe = HealthProbe(settings=ProbeSettings(health_check_enabled=False))
        probe.install(FastAPI())

        assert probe.resolve("/health") is None
        assert probe.resolve("/ready") is not None

    def test_configuration_frozen_after_install(self):
        """Test settings changes after install do not affect serving."""
        settings = ProbeSettings()
        probe = HealthProbe(settings=settings).install(FastAPI())

        settings.ready_check_path = "moved"

        assert probe.ready.path == "/ready"
        assert probe.resolve("/moved") is None

    def test_checks_locked_after_install(self):
        """Test registration after install is rejected."""
        probe = HealthProbe(settings=ProbeSettings()).install(FastAPI())

        with pytest.raises(RuntimeError):
            probe.health_checks(lambda c: c.check("db", async_true))

    def test_double_install_rejected(self):
        """Test a probe installs once."""
        probe = HealthProbe(settings=ProbeSettings()).install(FastAPI())

        with pytest.raises(RuntimeError):
            probe.install(FastAPI())
