"""Application configuration helpers."""

from __future__ import annotations

from .env import float_env_var, optional_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy
from .remote_store import RemoteStoreConfig, get_remote_store_config

__all__ = [
    "ConfigurationError",
    "MissingConfigurationError",
    "RateLimit",
    "RemoteStoreConfig",
    "ResilienceConfig",
    "RetryPolicy",
    "float_env_var",
    "get_remote_store_config",
    "optional_env_var",
    "require_env_vars",
]
