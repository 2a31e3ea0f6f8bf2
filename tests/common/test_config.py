from __future__ import annotations

import pytest

from reconcipy.config import (
    ConfigurationError,
    MissingConfigurationError,
    float_env_var,
    get_remote_store_config,
    optional_env_var,
    require_env_vars,
)
from reconcipy.domain.reconciliation import RepublishPolicy


def test_require_env_vars_returns_stripped_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_VAR", "  value ")

    result = require_env_vars(["EXAMPLE_VAR"])

    assert result["EXAMPLE_VAR"] == "value"


def test_require_env_vars_lists_every_missing_name(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("MISSING_A", raising=False)
    monkeypatch.setenv("MISSING_B", "   ")

    with pytest.raises(MissingConfigurationError) as exc:
        require_env_vars(["MISSING_B", "MISSING_A"])

    assert "MISSING_A, MISSING_B" in str(exc.value)


def test_optional_env_var_treats_blank_as_unset(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_VAR", " ")

    assert optional_env_var("EXAMPLE_VAR") is None


@pytest.mark.parametrize("raw", ["abc", "0", "-1"])
def test_float_env_var_rejects_invalid_values(monkeypatch: pytest.MonkeyPatch, raw: str) -> None:
    monkeypatch.setenv("EXAMPLE_FLOAT", raw)

    with pytest.raises(ConfigurationError):
        float_env_var("EXAMPLE_FLOAT", default=1.0)


def test_remote_store_config_requires_base_url(clean_env: pytest.MonkeyPatch) -> None:
    del clean_env

    with pytest.raises(MissingConfigurationError, match="RECONCIPY_BASE_URL"):
        get_remote_store_config()


def test_remote_store_config_defaults(clean_env: pytest.MonkeyPatch) -> None:
    clean_env.setenv("RECONCIPY_BASE_URL", "https://store.example/api")

    config = get_remote_store_config()

    resilience = config.resilience
    assert resilience.base_url == "https://store.example/api/"
    assert resilience.timeout_seconds == 30.0
    assert resilience.retry is not None
    assert "PUT" not in resilience.retry.allowed_methods
    assert resilience.ratelimit is not None
    assert resilience.ratelimit.per_seconds == pytest.approx(0.2)
    assert resilience.default_headers is not None
    assert "Authorization" not in resilience.default_headers
    assert config.republish is RepublishPolicy.ON_CHANGE


def test_remote_store_config_reads_overrides(clean_env: pytest.MonkeyPatch) -> None:
    clean_env.setenv("RECONCIPY_BASE_URL", "https://store.example/")
    clean_env.setenv("RECONCIPY_API_TOKEN", "secret")
    clean_env.setenv("RECONCIPY_TIMEOUT_SECONDS", "5")
    clean_env.setenv("RECONCIPY_MAX_CALLS_PER_SECOND", "2")
    clean_env.setenv("RECONCIPY_REPUBLISH", "ALWAYS")

    config = get_remote_store_config()

    assert config.resilience.timeout_seconds == 5.0
    assert config.resilience.ratelimit is not None
    assert config.resilience.ratelimit.per_seconds == pytest.approx(0.5)
    assert config.resilience.default_headers is not None
    assert config.resilience.default_headers["Authorization"] == "Bearer secret"
    assert config.republish is RepublishPolicy.ALWAYS


def test_remote_store_config_rejects_unknown_republish_policy(
    clean_env: pytest.MonkeyPatch,
) -> None:
    clean_env.setenv("RECONCIPY_BASE_URL", "https://store.example/")
    clean_env.setenv("RECONCIPY_REPUBLISH", "sometimes")

    with pytest.raises(ConfigurationError, match="on-change"):
        get_remote_store_config()
