"""Health and ready probes for FastAPI applications."""

__version__ = "0.1.0"

from healthprobe.core.config import ProbeSettings, get_settings, normalize_path
from healthprobe.probe import HealthProbe, install
from healthprobe.services.checks import (
    Check,
    CheckAggregator,
    CheckBuilder,
    CheckEndpointConfig,
    CheckRegistry,
    ResponseDecision,
)

__all__ = [
    "Check",
    "CheckAggregator",
    "CheckBuilder",
    "CheckEndpointConfig",
    "CheckRegistry",
    "HealthProbe",
    "ProbeSettings",
    "ResponseDecision",
    "__version__",
    "get_settings",
    "install",
    "normalize_path",
]
