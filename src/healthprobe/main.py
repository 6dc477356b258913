"""FastAPI application factory and main entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from healthprobe import __version__
from healthprobe.core.config import ProbeSettings, get_settings
from healthprobe.probe import HealthProbe
from healthprobe.services.checks import CheckBuilder, disk_below, memory_below


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan context manager for startup/shutdown events."""
    # Startup
    app.state.started = True

    yield

    # Shutdown
    app.state.started = False


def create_app(settings: ProbeSettings | None = None) -> FastAPI:
    """Create and configure FastAPI application."""
    settings = settings or get_settings()
    logging.getLogger("healthprobe").setLevel(settings.log_level)

    app = FastAPI(
        title=settings.app_name,
        version=__version__,
        description="Health and ready probes",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.started = False

    # Register probes
    register_probes(app, settings)

    # Register routes
    register_routes(app)

    return app


def register_probes(app: FastAPI, settings: ProbeSettings) -> HealthProbe:
    """Install the health and ready probes."""

    def health(checks: CheckBuilder) -> None:
        checks.check("memory", memory_below())
        checks.check("disk", disk_below())

    def ready(checks: CheckBuilder) -> None:
        checks.check("app", lambda: bool(getattr(app.state, "started", False)))

    probe = HealthProbe(settings=settings)
    probe.health_checks(health)
    probe.ready_checks(ready)
    return probe.install(app)


def register_routes(app: FastAPI) -> None:
    """Register all application routes."""

    @app.get("/", tags=["System"])
    async def root():
        """Application info endpoint."""
        settings = app.state.settings
        return {
            "name": settings.app_name,
            "version": __version__,
        }


# Create application instance
app = create_app()
