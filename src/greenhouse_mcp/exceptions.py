"""Exception hierarchy shared by the Greenhouse token manager and client."""

from __future__ import annotations


class GreenhouseError(RuntimeError):
    """Base class for exceptions raised by the Greenhouse request layer."""


class ConfigurationError(GreenhouseError, ValueError):
    """Raised when credentials or other required settings are missing."""


class AuthError(GreenhouseError):
    """Raised when the OAuth2 token exchange fails."""

    def __init__(self, message: str, *, status_code: int = 0, reason: str | None = None, body: str | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.reason = reason
        self.body = body


class ApiError(GreenhouseError):
    """Raised when the Harvest API returns a non-success HTTP response."""

    def __init__(self, status_code: int, reason: str | None, body: str | None, url: str):
        status = f"{status_code} {reason}" if reason else str(status_code)
        super().__init__(f"Greenhouse API error: {status} - {body or ''}")
        self.status_code = status_code
        self.reason = reason
        self.body = body
        self.url = url


class ApiConnectionError(ApiError):
    """Raised when the client cannot reach the Harvest API."""

    def __init__(self, message: str, url: str):
        GreenhouseError.__init__(self, f"Connection error while requesting {url!r}: {message}")
        self.status_code = 0
        self.reason = None
        self.body = message
        self.url = url


class PageRequestError(GreenhouseError, ValueError):
    """Raised when a cursor is combined with other query parameters."""


__all__ = [
    "ApiConnectionError",
    "ApiError",
    "AuthError",
    "ConfigurationError",
    "GreenhouseError",
    "PageRequestError",
]
