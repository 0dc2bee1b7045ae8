"""OAuth2 client-credentials token management for the Harvest v3 API."""

from __future__ import annotations

import base64
import logging
import re
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Optional

import requests

from .config import DEFAULT_TOKEN_URL
from .exceptions import AuthError, ConfigurationError

LOGGER = logging.getLogger(__name__)

# Tokens are refreshed this long before their recorded expiry.
EXPIRY_BUFFER_MS = 60_000

_ISO_TAIL = re.compile(
    r"(?P<head>.*T\d{2}:\d{2}(?::\d{2})?)(?:[.,](?P<fraction>\d+))?(?P<offset>[+-]\d{2}(?::?\d{2})?)?$"
)


@dataclass(frozen=True, slots=True)
class Credentials:
    """Client id/secret pair issued for the Harvest API."""

    client_id: str
    client_secret: str

    def __post_init__(self) -> None:
        if not self.client_id or not self.client_secret:
            raise ConfigurationError(
                "Greenhouse client not configured. Set GREENHOUSE_CLIENT_ID and GREENHOUSE_CLIENT_SECRET."
            )

    def basic_auth_header(self) -> str:
        raw = f"{self.client_id}:{self.client_secret}".encode("utf-8")
        return f"Basic {base64.b64encode(raw).decode('ascii')}"

    def __repr__(self) -> str:
        return f"Credentials(client_id={self.client_id!r}, client_secret='***')"


@dataclass(slots=True)
class TokenCache:
    """Single cached bearer token and its absolute expiry in epoch milliseconds."""

    value: str
    expires_at_ms: int

    def is_valid(self, now_ms: int) -> bool:
        return now_ms < self.expires_at_ms - EXPIRY_BUFFER_MS


def _normalize_iso(text: str) -> str:
    """Pad fractions to microseconds and offsets to +HH:MM for fromisoformat."""

    match = _ISO_TAIL.match(text)
    if match is None:
        return text
    result = match.group("head")
    fraction = match.group("fraction")
    if fraction:
        result += "." + fraction[:6].ljust(6, "0")
    offset = match.group("offset")
    if offset:
        digits = offset[1:].replace(":", "")
        result += f"{offset[0]}{digits[:2]}:{digits[2:4] or '00'}"
    return result


def parse_expires_at(value: str) -> int:
    """Convert an ISO-8601 timestamp to epoch milliseconds (naive values are UTC)."""

    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(_normalize_iso(text))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return int(parsed.timestamp() * 1000)


@dataclass(slots=True)
class TokenManager:
    """Acquire, cache and refresh the process-wide bearer token.

    The cache slot is not guarded by a lock. Two callers that find the token
    stale at the same moment may both perform an exchange; the last write wins
    and both tokens remain individually valid.
    """

    credentials: Credentials
    token_url: str = DEFAULT_TOKEN_URL
    session: requests.Session = field(default_factory=requests.Session)
    timeout: float | None = None
    clock: Callable[[], float] = time.time
    _cache: Optional[TokenCache] = field(default=None, init=False, repr=False)

    @property
    def cached_token(self) -> Optional[TokenCache]:
        return self._cache

    def ensure_token(self) -> str:
        """Return a usable bearer token, exchanging credentials when needed."""

        cache = self._cache
        if cache is not None and cache.is_valid(self._now_ms()):
            return cache.value

        self._cache = self._exchange()
        return self._cache.value

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _now_ms(self) -> int:
        return int(self.clock() * 1000)

    def _exchange(self) -> TokenCache:
        headers = {
            "Authorization": self.credentials.basic_auth_header(),
            "Content-Type": "application/x-www-form-urlencoded",
            "Accept": "application/json",
        }
        LOGGER.info("Requesting Greenhouse access token from %s", self.token_url)
        try:
            response = self.session.request(
                "POST",
                self.token_url,
                headers=headers,
                data="grant_type=client_credentials",
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise AuthError(f"Failed to obtain access token: {exc}") from exc

        if not 200 <= response.status_code < 300:
            LOGGER.warning("Token endpoint returned status %s", response.status_code)
            raise AuthError(
                f"Failed to obtain access token: {response.status_code} {response.reason} - {response.text}",
                status_code=response.status_code,
                reason=response.reason,
                body=response.text,
            )

        try:
            payload = response.json()
            token = payload["access_token"]
            expires_at = payload["expires_at"]
            if not isinstance(token, str) or not isinstance(expires_at, str):
                raise TypeError("access_token and expires_at must be strings")
            expires_at_ms = parse_expires_at(expires_at)
        except (ValueError, KeyError, TypeError) as exc:
            LOGGER.debug("Malformed token response from %s: %s", self.token_url, response.text)
            raise AuthError(
                f"Malformed token response: {exc}",
                status_code=response.status_code,
                reason=response.reason,
                body=response.text,
            ) from exc

        LOGGER.info("Obtained Greenhouse access token expiring at %s", expires_at)
        return TokenCache(value=token, expires_at_ms=expires_at_ms)


__all__ = ["Credentials", "EXPIRY_BUFFER_MS", "TokenCache", "TokenManager", "parse_expires_at"]
