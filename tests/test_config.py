"""Tests for environment-driven configuration."""

from __future__ import annotations

import pytest

from greenhouse_mcp.config import DEFAULT_BASE_URL, DEFAULT_TOKEN_URL, GreenhouseConfig
from greenhouse_mcp.exceptions import ConfigurationError


def test_from_env_reads_credentials_and_defaults() -> None:
    config = GreenhouseConfig.from_env(
        {"GREENHOUSE_CLIENT_ID": " id ", "GREENHOUSE_CLIENT_SECRET": "secret\n"}
    )

    assert config.client_id == "id"
    assert config.client_secret == "secret"
    assert config.base_url == DEFAULT_BASE_URL
    assert config.token_url == DEFAULT_TOKEN_URL
    assert config.timeout is None


def test_from_env_overrides() -> None:
    config = GreenhouseConfig.from_env(
        {
            "GREENHOUSE_CLIENT_ID": "id",
            "GREENHOUSE_CLIENT_SECRET": "secret",
            "GREENHOUSE_BASE_URL": "https://harvest.example.test/v3/",
            "GREENHOUSE_TOKEN_URL": "https://auth.example.test/token",
            "GREENHOUSE_TIMEOUT": "7.5",
        }
    )

    assert config.base_url == "https://harvest.example.test/v3"
    assert config.token_url == "https://auth.example.test/token"
    assert config.timeout == 7.5


@pytest.mark.parametrize(
    "environ",
    [
        {},
        {"GREENHOUSE_CLIENT_ID": "id"},
        {"GREENHOUSE_CLIENT_SECRET": "secret"},
        {"GREENHOUSE_CLIENT_ID": "  ", "GREENHOUSE_CLIENT_SECRET": "secret"},
    ],
)
def test_missing_credentials_raise(environ) -> None:
    with pytest.raises(ConfigurationError):
        GreenhouseConfig.from_env(environ)


def test_invalid_timeout_raises() -> None:
    with pytest.raises(ConfigurationError):
        GreenhouseConfig.from_env(
            {"GREENHOUSE_CLIENT_ID": "id", "GREENHOUSE_CLIENT_SECRET": "secret", "GREENHOUSE_TIMEOUT": "soon"}
        )
