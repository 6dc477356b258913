"""Check definitions and the ordered check registry."""

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Iterator

logger = logging.getLogger(__name__)


# Zero-argument predicate, sync or async
CheckFunction = Callable[[], bool | Awaitable[bool]]


@dataclass(frozen=True)
class Check:
    """A named boolean check."""

    name: str
    predicate: CheckFunction

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name.strip():
            raise ValueError("The check name must not be empty")
        if not callable(self.predicate):
            raise TypeError(f"Check {self.name!r} predicate is not callable")


class CheckRegistry:
    """Insertion-ordered collection of checks, unique by name.

    The first check registered under a name wins; later registrations
    with the same name are ignored and do not change its position.
    """

    def __init__(self, checks: tuple[Check, ...] | list[Check] = ()):
        """Initialize registry.

        Args:
            checks: Initial checks, deduplicated in order
        """
        self._checks: dict[str, Check] = {}
        for check in checks:
            self.add(check)

    def add(self, check: Check) -> bool:
        """Add a check.

        Args:
            check: Check to add

        Returns:
            True if added, False if the name was already registered
        """
        if check.name in self._checks:
            logger.warning(f"Check {check.name!r} already registered, ignoring duplicate")
            return False

        self._checks[check.name] = check
        logger.debug(f"Registered check {check.name!r} (total={len(self._checks)})")
        return True

    def get(self, name: str) -> Check | None:
        return self._checks.get(name)

    def names(self) -> list[str]:
        return list(self._checks)

    def freeze(self) -> tuple[Check, ...]:
        """Snapshot of the checks in registration order."""
        return tuple(self._checks.values())

    def __contains__(self, name: object) -> bool:
        return name in self._checks

    def __iter__(self) -> Iterator[Check]:
        return iter(tuple(self._checks.values()))

    def __len__(self) -> int:
        return len(self._checks)

    def __repr__(self) -> str:
        return f"CheckRegistry({self.names()!r})"


class CheckBuilder:
    """Registration block for an endpoint's checks.

    Usage:
        builder = CheckBuilder()
        builder.check("db", ping_database)

        @builder.check("cache")
        async def cache_alive() -> bool:
            return await redis.ping()
    """

    def __init__(self):
        self.checks = CheckRegistry()

    def check(self, name: str, predicate: CheckFunction | None = None) -> Any:
        """Register a check, directly or as a decorator.

        Args:
            name: Name of the check in the response body
            predicate: Function returning the result of the check

        Returns:
            The decorator when no predicate is given, otherwise the predicate
        """
        if predicate is None:

            def decorator(fn: CheckFunction) -> CheckFunction:
                self.checks.add(Check(name, fn))
                return fn

            return decorator

        self.checks.add(Check(name, predicate))
        return predicate

    def build(self) -> CheckRegistry:
        return self.checks
