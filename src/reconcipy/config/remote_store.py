"""Remote store connection settings."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

from reconcipy.domain.reconciliation import RepublishPolicy

from .env import float_env_var, optional_env_var, require_env_vars
from .errors import ConfigurationError
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy

DEFAULT_TIMEOUT_SECONDS: Final[float] = 30.0
DEFAULT_MAX_CALLS_PER_SECOND: Final[float] = 5.0


@dataclass(frozen=True, slots=True)
class RemoteStoreConfig:
    resilience: ResilienceConfig
    republish: RepublishPolicy = RepublishPolicy.ON_CHANGE


def _parse_republish(raw: str | None) -> RepublishPolicy:
    if raw is None:
        return RepublishPolicy.ON_CHANGE
    try:
        return RepublishPolicy(raw.lower())
    except ValueError:
        allowed = ", ".join(policy.value for policy in RepublishPolicy)
        raise ConfigurationError(
            f"RECONCIPY_REPUBLISH must be one of: {allowed}; got {raw!r}"
        ) from None


def get_remote_store_config() -> RemoteStoreConfig:
    values = require_env_vars(("RECONCIPY_BASE_URL",))
    api_token = optional_env_var("RECONCIPY_API_TOKEN")
    timeout = float_env_var("RECONCIPY_TIMEOUT_SECONDS", default=DEFAULT_TIMEOUT_SECONDS)
    calls_per_second = float_env_var(
        "RECONCIPY_MAX_CALLS_PER_SECOND", default=DEFAULT_MAX_CALLS_PER_SECOND
    )

    headers = {"Accept": "application/json"}
    if api_token is not None:
        headers["Authorization"] = f"Bearer {api_token}"

    resilience = ResilienceConfig(
        name="remote-store",
        base_url=values["RECONCIPY_BASE_URL"].rstrip("/") + "/",
        timeout_seconds=timeout or DEFAULT_TIMEOUT_SECONDS,
        retry=RetryPolicy(),
        ratelimit=RateLimit(max_calls=1, per_seconds=1.0 / calls_per_second)
        if calls_per_second
        else None,
        default_headers=headers,
    )
    return RemoteStoreConfig(
        resilience=resilience,
        republish=_parse_republish(optional_env_var("RECONCIPY_REPUBLISH")),
    )
