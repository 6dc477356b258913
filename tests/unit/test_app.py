"""Test cases for FastAPI application."""

import logging

from fastapi.testclient import TestClient

from healthprobe.core.config import ProbeSettings
from healthprobe.main import create_app


class TestHealthEndpoint:
    """Test the application's health endpoint."""

    def test_health_reports_system_checks(self, client: TestClient):
        """Test that health endpoint reports memory and disk."""
        response = client.get("/health")

        assert response.status_code in (200, 500)
        assert list(response.json()) == ["memory", "disk"]

    def test_ready_after_startup(self, client: TestClient):
        """Test that ready passes once the app has started."""
        response = client.get("/ready")

        assert response.status_code == 200
        assert response.json() == {"app": True}

    def test_not_ready_before_startup(self):
        """Test that ready fails when lifespan has not run."""
        client = TestClient(create_app(ProbeSettings()))

        response = client.get("/ready")

        assert response.status_code == 500
        assert response.json() == {"app": False}


class TestRoot:
    """Test root endpoint."""

    def test_root_returns_info(self, client: TestClient):
        """Test that root returns application info."""
        response = client.get("/")

        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "healthprobe"
        assert "version" in data


class TestProbeSettings:
    """Test settings flow into the installed probe."""

    def test_custom_paths(self):
        """Test configured paths are served."""
        app = create_app(ProbeSettings(health_check_path="livez", ready_check_path="readyz"))

        with TestClient(app) as client:
            assert client.get("/readyz").status_code == 200
            assert client.get("/ready").status_code == 404
            assert list(client.get("/livez").json()) == ["memory", "disk"]

    def test_installed_on_state(self, app):
        """Test the probe is stored on app state."""
        assert app.state.health_probe.installed is True


class TestLogging:
    """Test logging configuration."""

    def test_log_level_applied(self):
        """Test the configured level is set on the package logger."""
        package_logger = logging.getLogger("healthprobe")
        previous = package_logger.level
        try:
            create_app(ProbeSettings(log_level="DEBUG"))

            assert package_logger.level == logging.DEBUG
        finally:
            package_logger.setLevel(previous)
