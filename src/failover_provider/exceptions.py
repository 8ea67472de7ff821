"""Errors raised by the failover layer itself.

Provider errors are never wrapped: when retries run out, the exception raised
by the last provider reaches the caller unchanged.  Everything here describes
a misuse of the failover layer, not a provider outage.
"""

from __future__ import annotations


class FailoverError(Exception):
    """Base class for all failover-layer errors."""

    def __init__(self, message: str, *, code: str = "FAILOVER_ERROR") -> None:
        self.message = message
        self.code = code
        super().__init__(message)


# ── Configuration ────────────────────────────────────────────
class ConfigurationError(FailoverError):
    """The failover provider was built or configured incorrectly."""

    def __init__(self, message: str) -> None:
        super().__init__(message, code="CONFIGURATION_ERROR")
