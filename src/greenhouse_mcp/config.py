"""Configuration helpers for the Greenhouse MCP server."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping

from .exceptions import ConfigurationError

DEFAULT_BASE_URL = "https://harvest.greenhouse.io/v3"
DEFAULT_TOKEN_URL = "https://auth.greenhouse.io/token"


@dataclass(slots=True)
class GreenhouseConfig:
    """Runtime configuration for accessing the Harvest API."""

    client_id: str
    client_secret: str
    base_url: str = DEFAULT_BASE_URL
    token_url: str = DEFAULT_TOKEN_URL
    timeout: float | None = None

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "GreenhouseConfig":
        """Create a configuration object from environment variables."""

        env = os.environ if environ is None else environ
        client_id = (env.get("GREENHOUSE_CLIENT_ID") or "").strip()
        client_secret = (env.get("GREENHOUSE_CLIENT_SECRET") or "").strip()
        if not client_id or not client_secret:
            raise ConfigurationError(
                "GREENHOUSE_CLIENT_ID and GREENHOUSE_CLIENT_SECRET environment variables are required"
            )

        base_url = env.get("GREENHOUSE_BASE_URL") or DEFAULT_BASE_URL
        token_url = env.get("GREENHOUSE_TOKEN_URL") or DEFAULT_TOKEN_URL
        timeout_raw = env.get("GREENHOUSE_TIMEOUT")
        try:
            timeout = float(timeout_raw) if timeout_raw else None
        except ValueError as exc:
            raise ConfigurationError(f"GREENHOUSE_TIMEOUT must be a number, got {timeout_raw!r}") from exc

        return cls(
            client_id=client_id,
            client_secret=client_secret,
            base_url=base_url.rstrip("/"),
            token_url=token_url,
            timeout=timeout,
        )
