"""Per-entry attempt history and the health snapshots derived from it.

Samples older than the window are dropped before anything is read.  The
derived status is informational only: switching is strictly round robin.
"""

from __future__ import annotations

import threading
import time
from collections import deque
from typing import NamedTuple

from failover_provider.types import ProviderHealth, ProviderStatus


class _Sample(NamedTuple):
    at: float
    ok: bool
    latency_ms: int


def _nearest_rank(ordered: list[int], p: float) -> float:
    if not ordered:
        return 0.0
    return float(ordered[min(int(len(ordered) * p), len(ordered) - 1)])


class ProviderHealthTracker:
    """Windowed success/failure history for one provider entry."""

    def __init__(
        self,
        name: str,
        *,
        window_seconds: float = 60.0,
        degraded_threshold: float = 0.30,
        unhealthy_threshold: float = 0.60,
    ) -> None:
        self._name = name
        self._window = window_seconds
        self._thresholds = (unhealthy_threshold, degraded_threshold)
        self._samples: deque[_Sample] = deque()
        self._lock = threading.Lock()

        self._successes = 0
        self._failures = 0
        self._streak = 0
        self._last_error: tuple[str, float] | None = None
        self._probe_ok: bool | None = None

    def record_success(self, latency_ms: int) -> None:
        with self._lock:
            self._append(_Sample(time.monotonic(), True, latency_ms))
            self._successes += 1
            self._streak = 0

    def record_failure(self, error: BaseException | str, latency_ms: int = 0) -> None:
        if isinstance(error, BaseException):
            error = f"{type(error).__name__}: {error}"
        now = time.monotonic()
        with self._lock:
            self._append(_Sample(now, False, latency_ms))
            self._failures += 1
            self._streak += 1
            self._last_error = (error, now)

    def record_probe(self, ok: bool) -> None:
        with self._lock:
            self._probe_ok = ok

    @property
    def consecutive_failures(self) -> int:
        return self._streak

    @property
    def status(self) -> ProviderStatus:
        with self._lock:
            return self._classify(self._window_samples())

    def snapshot(
        self,
        *,
        index: int,
        active: bool = False,
        latency_ms: int = 0,
        has_probe: bool = False,
    ) -> ProviderHealth:
        with self._lock:
            samples = self._window_samples()
            ordered = sorted(s.latency_ms for s in samples)
            ok = sum(1 for s in samples if s.ok)
            error, error_time = self._last_error or (None, None)
            return ProviderHealth(
                index=index,
                name=self._name,
                active=active,
                status=self._classify(samples),
                total_requests=self._successes + self._failures,
                total_successes=self._successes,
                total_failures=self._failures,
                consecutive_failures=self._streak,
                success_rate=round(ok / len(samples), 4) if samples else 1.0,
                latency_ms=latency_ms,
                latency_p50_ms=_nearest_rank(ordered, 0.50),
                latency_p95_ms=_nearest_rank(ordered, 0.95),
                latency_p99_ms=_nearest_rank(ordered, 0.99),
                last_error=error,
                last_error_time=error_time,
                has_probe=has_probe,
                probe_ok=self._probe_ok,
            )

    # Caller holds the lock.
    def _append(self, sample: _Sample) -> None:
        self._samples.append(sample)
        self._drop_expired(sample.at)

    def _drop_expired(self, now: float) -> None:
        cutoff = now - self._window
        while self._samples and self._samples[0].at < cutoff:
            self._samples.popleft()

    def _window_samples(self) -> list[_Sample]:
        self._drop_expired(time.monotonic())
        return list(self._samples)

    def _classify(self, samples: list[_Sample]) -> ProviderStatus:
        if not samples:
            return ProviderStatus.HEALTHY
        failure_rate = sum(1 for s in samples if not s.ok) / len(samples)
        unhealthy, degraded = self._thresholds
        if failure_rate >= unhealthy:
            return ProviderStatus.UNHEALTHY
        if failure_rate >= degraded:
            return ProviderStatus.DEGRADED
        return ProviderStatus.HEALTHY
