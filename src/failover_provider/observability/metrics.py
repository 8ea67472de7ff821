"""Prometheus metrics for provider failover."""

from __future__ import annotations

from prometheus_client import Counter, Histogram


# ── Attempt metrics ──────────────────────────────────────────
FAILOVER_ATTEMPTS = Counter(
    "failover_attempts_total",
    "Provider attempts made through the failover handle",
    ["provider", "outcome"],  # success / failure
)

FAILOVER_ATTEMPT_LATENCY = Histogram(
    "failover_attempt_latency_seconds",
    "Duration of a single provider attempt",
    ["provider"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0),
)

# ── Switch metrics ───────────────────────────────────────────
FAILOVER_SWITCHES = Counter(
    "failover_switches_total",
    "Round-robin switches away from a failed provider",
    ["provider"],
)
