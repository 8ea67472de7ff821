"""Transparent failover across interchangeable providers.

Wraps any number of objects sharing a capability surface (RPC clients,
SDK instances, ...) behind a single handle that forwards every call to the
active provider and rotates to the next one on failure.
"""

from failover_provider.config import Settings, get_settings
from failover_provider.exceptions import ConfigurationError, FailoverError
from failover_provider.gateway import FailoverHandle, FailoverProvider
from failover_provider.health import ProviderHealthTracker
from failover_provider.observability import configure_logging
from failover_provider.registry import ProviderEntry, ProviderRegistry
from failover_provider.types import ProviderHealth, ProviderStatus, RetryPolicy

__all__ = [
    "ConfigurationError",
    "FailoverError",
    "FailoverHandle",
    "FailoverProvider",
    "ProviderEntry",
    "ProviderHealth",
    "ProviderHealthTracker",
    "ProviderRegistry",
    "ProviderStatus",
    "RetryPolicy",
    "Settings",
    "configure_logging",
    "get_settings",
]
