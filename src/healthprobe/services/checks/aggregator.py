"""Check aggregation and response decision."""

import asyncio
import inspect
import json
import logging
import time
from types import MappingProxyType
from typing import Any, Iterable, Mapping

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from healthprobe.services.checks.registry import Check

logger = logging.getLogger(__name__)


class CheckFailure(BaseModel):
    """A check that raised, timed out or returned a non-bool value."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Check name")
    reason: str = Field(..., description="Failure reason")


class CheckEndpointConfig(BaseModel):
    """Settings for one probe endpoint."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    enabled: bool = Field(default=True, description="Whether the endpoint is served")
    path: str = Field(..., description="Normalized endpoint path")
    checks: tuple[Check, ...] = Field(default=(), description="Checks in registration order")


class CheckTimeoutError(TimeoutError):
    """A check did not finish within the configured timeout."""


class ResponseDecision(BaseModel):
    """Status code and serialized body for one probe request."""

    model_config = ConfigDict(frozen=True)

    status_code: int = Field(..., description="HTTP status code")
    body: str = Field(..., description="JSON encoded check results")
    results: Mapping[str, bool] = Field(
        default_factory=dict, description="Read-only outcome per check, in check order"
    )
    failures: tuple[CheckFailure, ...] = Field(default=(), description="Isolated check errors")
    duration_ms: float = Field(default=0.0, description="Time spent running checks")

    @field_validator("results", mode="after")
    @classmethod
    def _freeze_results(cls, value: Mapping[str, bool]) -> Mapping[str, bool]:
        return MappingProxyType(dict(value))

    @field_serializer("results")
    def _serialize_results(self, value: Mapping[str, bool]) -> dict[str, bool]:
        return dict(value)

    @property
    def successful(self) -> bool:
        return all(self.results.values())


class CheckAggregator:
    """Runs a collection of checks and decides the probe response."""

    def __init__(
        self,
        successful_status_code: int = 200,
        unsuccessful_status_code: int = 500,
        check_timeout: float | None = None,
        isolate_failures: bool = True,
        concurrent: bool = False,
    ):
        """Initialize aggregator.

        Args:
            successful_status_code: Status returned when every check passes
            unsuccessful_status_code: Status returned when any check fails
            check_timeout: Seconds allowed per check, None waits forever
            isolate_failures: Record a raising check as False instead of raising
            concurrent: Run checks concurrently rather than one after another
        """
        self.successful_status_code = successful_status_code
        self.unsuccessful_status_code = unsuccessful_status_code
        self.check_timeout = check_timeout
        self.isolate_failures = isolate_failures
        self.concurrent = concurrent

    async def evaluate(self, checks: Iterable[Check]) -> ResponseDecision:
        """Run all checks and build the response decision.

        Results keep the order of ``checks`` whatever order the checks
        complete in. An empty collection is successful.

        Args:
            checks: Checks in registration order

        Returns:
            The response decision
        """
        checks = tuple(checks)
        start = time.perf_counter()

        if self.concurrent:
            outcomes = await asyncio.gather(*(self._run_check(c) for c in checks))
        else:
            outcomes = [await self._run_check(c) for c in checks]

        results: dict[str, bool] = {}
        failures: list[CheckFailure] = []
        for check, (outcome, failure) in zip(checks, outcomes):
            results[check.name] = outcome
            if failure:
                failures.append(failure)

        successful = all(results.values())
        status_code = (
            self.successful_status_code if successful else self.unsuccessful_status_code
        )
        duration_ms = (time.perf_counter() - start) * 1000
        if not successful:
            failed = [name for name, ok in results.items() if not ok]
            logger.info(
                f"Checks failed: {', '.join(failed)} "
                f"(status={status_code}, duration={duration_ms:.1f}ms)"
            )

        return ResponseDecision(
            status_code=status_code,
            body=json.dumps(results, ensure_ascii=False, separators=(",", ":")),
            results=results,
            failures=tuple(failures),
            duration_ms=duration_ms,
        )

    async def dispatch(
        self,
        path: str,
        ready: CheckEndpointConfig,
        health: CheckEndpointConfig,
    ) -> ResponseDecision | None:
        """Evaluate the endpoint matching ``path``.

        Ready is matched before health. Paths must be equal exactly.

        Args:
            path: Request path
            ready: Ready endpoint config
            health: Health endpoint config

        Returns:
            The decision, or None when no enabled endpoint matches
        """
        if ready.enabled and path == ready.path:
            return await self.evaluate(ready.checks)
        if health.enabled and path == health.path:
            return await self.evaluate(health.checks)
        return None

    async def _run_check(self, check: Check) -> tuple[bool, CheckFailure | None]:
        try:
            outcome = await self._await_outcome(check)
            if not isinstance(outcome, bool):
                raise TypeError(f"returned {type(outcome).__name__}, expected bool")
            return outcome, None

        except Exception as e:
            if not self.isolate_failures:
                raise
            reason = str(e) or type(e).__name__
            logger.warning(f"Check {check.name!r} failed: {reason}")
            return False, CheckFailure(name=check.name, reason=reason)

    async def _await_outcome(self, check: Check) -> Any:
        if self.check_timeout is None:
            return await self._invoke(check)

        # Only the wait running out counts as a timeout, not a TimeoutError from the check
        invocation = asyncio.ensure_future(self._invoke(check))
        try:
            done, _ = await asyncio.wait({invocation}, timeout=self.check_timeout)
        finally:
            if not invocation.done():
                invocation.cancel()

        if not done:
            raise CheckTimeoutError(f"timed out after {self.check_timeout}s")
        return invocation.result()

    async def _invoke(self, check: Check) -> Any:
        # Blocking predicates run on a worker thread to keep the loop free
        if inspect.iscoroutinefunction(check.predicate):
            result = check.predicate()
        else:
            result = await asyncio.to_thread(check.predicate)

        if inspect.isawaitable(result):
            result = await result
        return result
