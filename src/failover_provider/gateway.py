"""Failover gateway — one handle in front of many interchangeable providers.

The handle returned by ``FailoverProvider.initialize()`` looks like the
providers it wraps.  Every attribute access is resolved against whichever
provider is currently active; method calls run inside a retry loop that
switches to the next provider (round robin) when an attempt fails::

    client = (
        FailoverProvider[RpcClient](retries=2)
        .add_provider(RpcClient("https://primary"))
        .add_provider(RpcClient("https://secondary"))
        .initialize()
    )
    block = await client.get_block_number()

Coroutine-returning methods keep their calling convention: the handle hands
back a coroutine, and retries continue when that coroutine is awaited.  When
the budget runs out, or ``should_retry_on`` vetoes an error, the provider's own
exception is re-raised unchanged.
"""

from __future__ import annotations

import asyncio
import functools
import inspect
import time
from typing import Any, Generic, TypeVar, cast

import structlog
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    Retrying,
    retry_if_exception,
    stop_after_attempt,
)

from failover_provider.config import Settings, get_settings
from failover_provider.exceptions import ConfigurationError
from failover_provider.observability.metrics import (
    FAILOVER_ATTEMPT_LATENCY,
    FAILOVER_ATTEMPTS,
    FAILOVER_SWITCHES,
)
from failover_provider.registry import ProviderEntry, ProviderRegistry
from failover_provider.types import (
    HealthProbe,
    ProviderHealth,
    RetryPolicy,
    RetryPredicate,
)

logger = structlog.get_logger(__name__)

T = TypeVar("T")


class FailoverHandle:
    """Stand-in object whose attributes come from the active provider."""

    __slots__ = ("_failover",)

    def __init__(self, failover: FailoverProvider[Any]) -> None:
        self._failover = failover

    def __getattr__(self, name: str) -> Any:
        if name == "_failover" or (name.startswith("__") and name.endswith("__")):
            raise AttributeError(name)
        return self._failover._resolve(name)

    def __repr__(self) -> str:
        registry = self._failover.registry
        return (
            f"<FailoverHandle active={registry.active().name!r} "
            f"providers={len(registry)}>"
        )


class FailoverProvider(Generic[T]):
    """Builder and retry engine behind a ``FailoverHandle``.

    Usage::

        animal = (
            FailoverProvider[Animal]()
            .add_provider(Cockroach())
            .add_provider(Cat())
            .initialize()
        )
        await animal.speak()  # "meow": the cockroach failed, the cat answered

    Args:
        retries: Extra attempts per logical call after the first failure.
        should_retry_on: Predicate over the raised error; ``False`` stops the
            call immediately without switching.
        health_window_seconds: Sliding window for per-entry health snapshots.
        degraded_threshold: Failure rate at which an entry reports DEGRADED.
        unhealthy_threshold: Failure rate at which an entry reports UNHEALTHY.

    Raises:
        ConfigurationError: If ``retries`` is negative.
    """

    def __init__(
        self,
        *,
        retries: int = 3,
        should_retry_on: RetryPredicate | None = None,
        health_window_seconds: float = 60.0,
        degraded_threshold: float = 0.30,
        unhealthy_threshold: float = 0.60,
    ) -> None:
        if should_retry_on is None:
            self._policy = RetryPolicy(max_retries=retries)
        else:
            self._policy = RetryPolicy(max_retries=retries, should_retry_on=should_retry_on)

        self._registry: ProviderRegistry[T] = ProviderRegistry(
            window_seconds=health_window_seconds,
            degraded_threshold=degraded_threshold,
            unhealthy_threshold=unhealthy_threshold,
        )
        self._handle: FailoverHandle | None = None

    @classmethod
    def from_settings(
        cls,
        settings: Settings | None = None,
        *,
        should_retry_on: RetryPredicate | None = None,
    ) -> FailoverProvider[T]:
        """Build a provider from ``FAILOVER_*`` settings.

        Logging is configured separately, see
        ``failover_provider.observability.configure_logging(settings=...)``.
        """
        settings = settings or get_settings()
        return cls(
            retries=settings.retries,
            should_retry_on=should_retry_on,
            health_window_seconds=settings.health_window_seconds,
            degraded_threshold=settings.health_degraded_threshold,
            unhealthy_threshold=settings.health_unhealthy_threshold,
        )

    # ── Building ─────────────────────────────────────────────
    def add_provider(
        self,
        provider: T,
        health_probe: HealthProbe | None = None,
        *,
        name: str | None = None,
    ) -> FailoverProvider[T]:
        """Add a provider to the list of candidates.

        Membership is sealed once ``initialize()`` has produced a handle;
        later calls are ignored.
        """
        if self._handle is not None:
            logger.warning(
                "provider_registry_sealed",
                provider=name or type(provider).__name__,
                providers=len(self._registry),
            )
            return self
        self._registry.add(provider, health_probe, name=name)
        return self

    def initialize(self) -> T:
        """Return the forwarding handle, typed as the wrapped provider.

        Raises:
            ConfigurationError: If no provider has been added.
        """
        if not len(self._registry):
            raise ConfigurationError(
                "Cannot initialize an empty provider. "
                "Call `add_provider` before this function."
            )
        if self._handle is None:
            self._handle = FailoverHandle(self)
            logger.info(
                "failover_initialized",
                providers=[entry.name for entry in self._registry],
                retries=self._policy.max_retries,
            )
        return cast(T, self._handle)

    # ── Inspection ───────────────────────────────────────────
    @property
    def providers(self) -> list[ProviderEntry[T]]:
        return self._registry.entries

    @property
    def registry(self) -> ProviderRegistry[T]:
        return self._registry

    @property
    def retry_policy(self) -> RetryPolicy:
        return self._policy

    # ── Interception ─────────────────────────────────────────
    def _resolve(self, name: str) -> Any:
        member = getattr(self._registry.active().provider, name)
        if not callable(member):
            return member

        @functools.wraps(member, updated=())
        def forward(*args: Any, **kwargs: Any) -> Any:
            return self._call(name, args, kwargs)

        return forward

    def _call(self, name: str, args: tuple[Any, ...], kwargs: dict[str, Any]) -> Any:
        for attempt in Retrying(**self._retry_options(self._policy.max_attempts)):
            with attempt:
                entry = self._registry.active()
                start = time.monotonic()
                try:
                    result = getattr(entry.provider, name)(*args, **kwargs)
                except Exception as exc:
                    self._record(entry, name, start, exc)
                    raise

                if inspect.isawaitable(result):
                    # Remaining budget follows the call into the coroutine.
                    used = attempt.retry_state.attempt_number - 1
                    return self._settle(
                        name,
                        args,
                        kwargs,
                        entry,
                        start,
                        result,
                        self._policy.max_retries - used,
                    )

                self._record(entry, name, start)
                return result

    async def _settle(
        self,
        name: str,
        args: tuple[Any, ...],
        kwargs: dict[str, Any],
        entry: ProviderEntry[T],
        start: float,
        pending: Any,
        retries: int,
    ) -> Any:
        if inspect.iscoroutine(pending) and (
            inspect.getcoroutinestate(pending) == inspect.CORO_CREATED
        ):
            # Nothing has run yet; the attempt starts when the caller awaits.
            start = time.monotonic()

        async for attempt in AsyncRetrying(**self._retry_options(retries + 1)):
            with attempt:
                if pending is None:
                    entry = self._registry.active()
                    start = time.monotonic()
                try:
                    if pending is None:
                        pending = getattr(entry.provider, name)(*args, **kwargs)
                    result = await pending if inspect.isawaitable(pending) else pending
                except Exception as exc:
                    self._record(entry, name, start, exc)
                    raise
                finally:
                    pending = None

                self._record(entry, name, start)
                return result

    def _retry_options(self, attempts: int) -> dict[str, Any]:
        return {
            "stop": stop_after_attempt(attempts),
            "retry": retry_if_exception(self._should_retry),
            "before_sleep": self._switch,
            "reraise": True,
        }

    def _should_retry(self, error: BaseException) -> bool:
        if self._policy.is_retryable(error):
            return True
        if isinstance(error, Exception):
            logger.info(
                "provider_retry_vetoed",
                provider=self._registry.active().name,
                error=f"{type(error).__name__}: {error}",
            )
        return False

    def _switch(self, retry_state: RetryCallState) -> None:
        failed = self._registry.active()
        upcoming = self._registry.advance()
        FAILOVER_SWITCHES.labels(provider=failed.name).inc()
        logger.info(
            "provider_switched",
            from_provider=failed.name,
            to_provider=upcoming.name,
            attempt=retry_state.attempt_number,
        )

    def _record(
        self,
        entry: ProviderEntry[T],
        operation: str,
        start: float,
        error: Exception | None = None,
    ) -> None:
        elapsed = time.monotonic() - start
        entry.latency_ms = round(elapsed * 1000)
        FAILOVER_ATTEMPT_LATENCY.labels(provider=entry.name).observe(elapsed)

        if error is None:
            entry.tracker.record_success(entry.latency_ms)
            FAILOVER_ATTEMPTS.labels(provider=entry.name, outcome="success").inc()
            return

        entry.tracker.record_failure(error, entry.latency_ms)
        FAILOVER_ATTEMPTS.labels(provider=entry.name, outcome="failure").inc()
        logger.warning(
            "provider_attempt_failed",
            provider=entry.name,
            operation=operation,
            latency_ms=entry.latency_ms,
            error=f"{type(error).__name__}: {error}",
        )

    # ── Health observation ───────────────────────────────────
    def get_health(self, index: int) -> ProviderHealth:
        entry = self._registry.entries[index]
        return entry.tracker.snapshot(
            index=index,
            active=index == self._registry.active_index,
            latency_ms=entry.latency_ms,
            has_probe=entry.health_probe is not None,
        )

    def get_all_health(self) -> list[ProviderHealth]:
        return [self.get_health(i) for i in range(len(self._registry))]

    async def check_health(self) -> list[ProviderHealth]:
        """Run every registered health probe once and report the results.

        Probe outcomes are recorded on the snapshots only; the active
        provider and the recorded latencies are left untouched.
        """
        await asyncio.gather(
            *(
                self._probe(entry, entry.health_probe)
                for entry in self._registry
                if entry.health_probe is not None
            )
        )
        return self.get_all_health()

    async def _probe(self, entry: ProviderEntry[T], probe: HealthProbe) -> None:
        try:
            outcome = probe()
            if inspect.isawaitable(outcome):
                outcome = await outcome
        except Exception as exc:
            logger.warning(
                "health_probe_failed",
                provider=entry.name,
                error=f"{type(exc).__name__}: {exc}",
            )
            entry.tracker.record_probe(False)
            return
        entry.tracker.record_probe(outcome is not False)
