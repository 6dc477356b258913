"""Health and ready probe feature for FastAPI/Starlette applications."""

import logging
from typing import Awaitable, Callable

from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import Response

from healthprobe.api.middleware import HealthProbeMiddleware
from healthprobe.core.config import ProbeSettings
from healthprobe.services.checks import (
    CheckAggregator,
    CheckBuilder,
    CheckEndpointConfig,
    CheckRegistry,
    ResponseDecision,
)

logger = logging.getLogger(__name__)


# Request handler type
Handler = Callable[[Request], Awaitable[Response]]
RouteWrapper = Callable[[Handler], Handler]


class HealthProbe:
    """Serves a health and a ready endpoint from two sets of checks.

    Checks and settings are fixed when the probe is installed. Each
    instance owns its own checks, so several probes can live in one
    process.
    """

    def __init__(
        self,
        settings: ProbeSettings | None = None,
        route_wrapper: RouteWrapper | None = None,
    ):
        """Initialize probe.

        Args:
            settings: Probe settings, read from the environment when omitted
            route_wrapper: Applied to both handlers before they are served
        """
        self.settings = settings or ProbeSettings()
        self.route_wrapper = route_wrapper
        self._health_checks = CheckRegistry()
        self._ready_checks = CheckRegistry()
        self._health: CheckEndpointConfig | None = None
        self._ready: CheckEndpointConfig | None = None
        self._aggregator: CheckAggregator | None = None
        self._routes: dict[str, Handler] = {}

    @classmethod
    def configure(
        cls,
        settings: ProbeSettings | None = None,
        route_wrapper: RouteWrapper | None = None,
        **overrides,
    ) -> "HealthProbe":
        """Create a probe with settings overrides.

        Args:
            settings: Base settings
            route_wrapper: Handler wrapper
            **overrides: ProbeSettings fields to override

        Returns:
            New probe
        """
        if settings is None:
            settings = ProbeSettings(**overrides)
        elif overrides:
            settings = ProbeSettings(**{**settings.model_dump(), **overrides})
        return cls(settings=settings, route_wrapper=route_wrapper)

    @property
    def installed(self) -> bool:
        return self._aggregator is not None

    def health_checks(self, init: Callable[[CheckBuilder], None]) -> CheckRegistry:
        """Replace the health endpoint checks.

        Args:
            init: Receives a CheckBuilder and registers checks on it

        Returns:
            The new check registry
        """
        self._health_checks = self._build_checks(init)
        return self._health_checks

    def ready_checks(self, init: Callable[[CheckBuilder], None]) -> CheckRegistry:
        """Replace the ready endpoint checks.

        Args:
            init: Receives a CheckBuilder and registers checks on it

        Returns:
            The new check registry
        """
        self._ready_checks = self._build_checks(init)
        return self._ready_checks

    def _build_checks(self, init: Callable[[CheckBuilder], None]) -> CheckRegistry:
        if self.installed:
            raise RuntimeError("Checks cannot be changed after the probe is installed")
        builder = CheckBuilder()
        init(builder)
        return builder.build()

    @property
    def health(self) -> CheckEndpointConfig:
        if self._health is not None:
            return self._health
        return CheckEndpointConfig(
            enabled=self.settings.health_check_enabled,
            path=self.settings.health_check_path,
            checks=self._health_checks.freeze(),
        )

    @property
    def ready(self) -> CheckEndpointConfig:
        if self._ready is not None:
            return self._ready
        return CheckEndpointConfig(
            enabled=self.settings.ready_check_enabled,
            path=self.settings.ready_check_path,
            checks=self._ready_checks.freeze(),
        )

    @property
    def aggregator(self) -> CheckAggregator:
        if self._aggregator is not None:
            return self._aggregator
        return self._create_aggregator()

    def _create_aggregator(self) -> CheckAggregator:
        return CheckAggregator(
            successful_status_code=self.settings.successful_check_status_code,
            unsuccessful_status_code=self.settings.unsuccessful_check_status_code,
            check_timeout=self.settings.check_timeout_seconds,
            isolate_failures=self.settings.isolate_failures,
            concurrent=self.settings.concurrent_checks,
        )

    async def dispatch(self, path: str) -> ResponseDecision | None:
        """Evaluate the endpoint served at ``path``.

        Args:
            path: Request path

        Returns:
            The decision, or None if no enabled endpoint matches
        """
        return await self.aggregator.dispatch(path, ready=self.ready, health=self.health)

    async def health_handler(self, request: Request) -> Response:
        """Serve the health endpoint."""
        return _respond(await self.aggregator.evaluate(self.health.checks))

    async def ready_handler(self, request: Request) -> Response:
        """Serve the ready endpoint."""
        return _respond(await self.aggregator.evaluate(self.ready.checks))

    def resolve(self, path: str) -> Handler | None:
        """Find the installed handler for an exact path."""
        return self._routes.get(path)

    def install(self, app: Starlette) -> "HealthProbe":
        """Freeze the configuration and add the probe middleware to ``app``.

        Args:
            app: FastAPI or Starlette application

        Returns:
            This probe
        """
        if self.installed:
            raise RuntimeError("Probe is already installed")

        self._ready = self.ready
        self._health = self.health
        self._aggregator = self._create_aggregator()

        # Same precedence as CheckAggregator.dispatch: ready first, enabled only
        for config, handler in (
            (self._ready, self.ready_handler),
            (self._health, self.health_handler),
        ):
            if not config.enabled:
                continue
            if self.route_wrapper is not None:
                handler = self.route_wrapper(handler)
            self._routes.setdefault(config.path, handler)

        app.add_middleware(HealthProbeMiddleware, probe=self)
        app.state.health_probe = self

        logger.info(
            f"Health probe installed: ready={self._describe(self._ready)}, "
            f"health={self._describe(self._health)}"
        )
        return self

    @staticmethod
    def _describe(config: CheckEndpointConfig) -> str:
        if not config.enabled:
            return "disabled"
        return f"{config.path} ({len(config.checks)} checks)"


def _respond(decision: ResponseDecision) -> Response:
    return Response(
        content=decision.body,
        status_code=decision.status_code,
        media_type="application/json",
    )


def install(
    app: Starlette,
    configure: Callable[[HealthProbe], None] | None = None,
    settings: ProbeSettings | None = None,
    route_wrapper: RouteWrapper | None = None,
) -> HealthProbe:
    """Install a health probe on an application.

    Args:
        app: FastAPI or Starlette application
        configure: Receives the probe to register checks before install
        settings: Probe settings
        route_wrapper: Applied to both handlers

    Returns:
        The installed probe
    """
    probe = HealthProbe(settings=settings, route_wrapper=route_wrapper)
    if configure is not None:
        configure(probe)
    return probe.install(app)
