"""Pytest configuration and fixtures."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from healthprobe.core.config import ProbeSettings
from healthprobe.probe import HealthProbe


@pytest.fixture(scope="session")
def app():
    """Create FastAPI application for testing."""
    from healthprobe.main import create_app

    return create_app(ProbeSettings())


@pytest.fixture(scope="session")
def client(app):
    """Create test client."""
    with TestClient(app) as client:
        yield client


@pytest.fixture(scope="function")
def settings():
    """Create settings instance for testing."""
    return ProbeSettings()


@pytest.fixture
def probe_client():
    """Build a test client for an app with a configured probe.

    Usage:
        client = probe_client(
            ready=lambda c: c.check("db", lambda: True),
            ready_check_path="newready",
        )
    """

    def _build(
        health=None,
        ready=None,
        route_wrapper=None,
        raise_server_exceptions=True,
        **overrides,
    ) -> TestClient:
        app = FastAPI()

        @app.get("/items")
        async def items():
            return {"items": []}

        probe = HealthProbe.configure(route_wrapper=route_wrapper, **overrides)
        if health is not None:
            probe.health_checks(health)
        if ready is not None:
            probe.ready_checks(ready)
        probe.install(app)
        return TestClient(app, raise_server_exceptions=raise_server_exceptions)

    return _build
