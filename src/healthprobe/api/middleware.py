"""Middleware answering probe requests before route resolution."""

from typing import TYPE_CHECKING

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

if TYPE_CHECKING:
    from healthprobe.probe import HealthProbe

PROBE_METHODS = ("GET", "HEAD")


class HealthProbeMiddleware(BaseHTTPMiddleware):
    """Serve health and ready probes, passing every other request on."""

    def __init__(self, app: ASGIApp, probe: "HealthProbe"):
        super().__init__(app)
        self.probe = probe

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.method in PROBE_METHODS:
            handler = self.probe.resolve(request.url.path)
            if handler is not None:
                return await handler(request)

        return await call_next(request)
