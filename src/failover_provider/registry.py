"""Provider registry — ordered candidates plus the shared round-robin cursor."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Generic, Iterator, TypeVar

from failover_provider.health import ProviderHealthTracker
from failover_provider.types import HealthProbe

T = TypeVar("T")


@dataclass
class ProviderEntry(Generic[T]):
    """One candidate provider and its bookkeeping.

    Attributes:
        provider:     The wrapped client object.
        name:         Label used in logs and metrics.
        tracker:      Attempt history for health snapshots.
        health_probe: Optional zero-argument probe.  Stored for
                      ``FailoverProvider.check_health``; never used to decide
                      a switch.
        latency_ms:   Duration of the latest completed attempt (0 until used).
    """

    provider: T
    name: str
    tracker: ProviderHealthTracker = field(repr=False)
    health_probe: HealthProbe | None = field(default=None, repr=False)
    latency_ms: int = 0


class ProviderRegistry(Generic[T]):
    """Holds providers in priority order and rotates through them."""

    def __init__(
        self,
        *,
        window_seconds: float = 60.0,
        degraded_threshold: float = 0.30,
        unhealthy_threshold: float = 0.60,
    ) -> None:
        self._entries: list[ProviderEntry[T]] = []
        self._active_index = 0
        self._lock = threading.Lock()

        self._window = window_seconds
        self._degraded_thr = degraded_threshold
        self._unhealthy_thr = unhealthy_threshold

    def add(
        self,
        provider: T,
        health_probe: HealthProbe | None = None,
        *,
        name: str | None = None,
    ) -> ProviderEntry[T]:
        """Append a provider at the lowest priority."""
        if name is None:
            name = f"{type(provider).__name__.lower()}-{len(self._entries)}"
        entry = ProviderEntry(
            provider=provider,
            name=name,
            tracker=ProviderHealthTracker(
                name,
                window_seconds=self._window,
                degraded_threshold=self._degraded_thr,
                unhealthy_threshold=self._unhealthy_thr,
            ),
            health_probe=health_probe,
        )
        self._entries.append(entry)
        return entry

    def active(self) -> ProviderEntry[T]:
        return self._entries[self._active_index]

    def advance(self) -> ProviderEntry[T]:
        """Move to the next entry in insertion order, wrapping at the end."""
        with self._lock:
            self._active_index = (self._active_index + 1) % len(self._entries)
            return self._entries[self._active_index]

    @property
    def active_index(self) -> int:
        return self._active_index

    @property
    def entries(self) -> list[ProviderEntry[T]]:
        return self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[ProviderEntry[T]]:
        return iter(self._entries)
