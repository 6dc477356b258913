"""Host resource checks built on psutil."""

import logging
from typing import Callable

import psutil

logger = logging.getLogger(__name__)


def memory_below(percent: float = 90.0) -> Callable[[], bool]:
    """Check that virtual memory usage stays under a threshold.

    Args:
        percent: Maximum used memory percentage

    Returns:
        Predicate for a health check
    """

    def check_memory() -> bool:
        used = psutil.virtual_memory().percent
        if used >= percent:
            logger.warning(f"Critical memory usage: {used}%")
            return False
        return True

    return check_memory


def disk_below(percent: float = 95.0, path: str = "/") -> Callable[[], bool]:
    """Check that disk usage of ``path`` stays under a threshold.

    Args:
        percent: Maximum used disk percentage
        path: Mount point to inspect

    Returns:
        Predicate for a health check
    """

    def check_disk() -> bool:
        used = psutil.disk_usage(path).percent
        if used >= percent:
            logger.warning(f"Critical disk usage on {path}: {used}%")
            return False
        return True

    return check_disk


def cpu_below(percent: float = 90.0, interval: float = 0.1) -> Callable[[], bool]:
    """Check that CPU usage stays under a threshold.

    Sampling blocks for ``interval`` seconds.
    """

    def check_cpu() -> bool:
        used = psutil.cpu_percent(interval=interval)
        if used >= percent:
            logger.warning(f"High CPU usage: {used}%")
            return False
        return True

    return check_cpu
