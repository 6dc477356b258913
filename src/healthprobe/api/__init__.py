"""HTTP integration for health probes."""

from healthprobe.api.middleware import HealthProbeMiddleware

__all__ = ["HealthProbeMiddleware"]
