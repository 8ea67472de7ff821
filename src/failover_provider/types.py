"""Core types for the failover provider."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Union

from failover_provider.exceptions import ConfigurationError

HealthProbe = Callable[[], Union[Awaitable[Any], Any]]
RetryPredicate = Callable[[BaseException], bool]


class ProviderStatus(str, enum.Enum):
    """Health status of a provider entry, derived from recent attempts."""

    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


def _always_retry(error: BaseException) -> bool:
    return True


@dataclass(frozen=True)
class RetryPolicy:
    """How many extra attempts one logical call may make, and on which errors.

    Attributes:
        max_retries:     Additional attempts allowed after the first failure.
                         Zero means the first failure is terminal.
        should_retry_on: Predicate over the raised error.  ``False`` makes the
                         error terminal regardless of the remaining budget.
    """

    max_retries: int = 3
    should_retry_on: RetryPredicate = _always_retry

    def __post_init__(self) -> None:
        if self.max_retries < 0:
            raise ConfigurationError(
                f"retries must be a non-negative integer, got {self.max_retries}"
            )

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1

    def is_retryable(self, error: BaseException) -> bool:
        """Only ordinary exceptions are eligible; cancellation always propagates."""
        if not isinstance(error, Exception):
            return False
        return bool(self.should_retry_on(error))


@dataclass
class ProviderHealth:
    """Read-only snapshot of a provider entry's health."""

    index: int
    name: str
    active: bool = False
    status: ProviderStatus = ProviderStatus.HEALTHY
    total_requests: int = 0
    total_successes: int = 0
    total_failures: int = 0
    consecutive_failures: int = 0
    success_rate: float = 1.0
    latency_ms: int = 0
    latency_p50_ms: float = 0.0
    latency_p95_ms: float = 0.0
    latency_p99_ms: float = 0.0
    last_error: str | None = None
    last_error_time: float | None = None
    has_probe: bool = False
    probe_ok: bool | None = None
