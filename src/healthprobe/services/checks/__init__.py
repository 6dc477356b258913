"""Check registration and aggregation module."""

from healthprobe.services.checks.aggregator import (
    CheckAggregator,
    CheckEndpointConfig,
    CheckFailure,
    CheckTimeoutError,
    ResponseDecision,
)
from healthprobe.services.checks.registry import (
    Check,
    CheckBuilder,
    CheckFunction,
    CheckRegistry,
)
from healthprobe.services.checks.system import cpu_below, disk_below, memory_below

__all__ = [
    "Check",
    "CheckAggregator",
    "CheckBuilder",
    "CheckEndpointConfig",
    "CheckFailure",
    "CheckFunction",
    "CheckRegistry",
    "CheckTimeoutError",
    "ResponseDecision",
    "cpu_below",
    "disk_below",
    "memory_below",
]
