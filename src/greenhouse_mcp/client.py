"""HTTP client for the Greenhouse Harvest v3 API with pagination support."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Generic, Mapping, Optional, TypeVar

import requests

from .auth import Credentials, TokenManager
from .config import DEFAULT_BASE_URL, GreenhouseConfig
from .exceptions import ApiConnectionError, ApiError, GreenhouseError
from .pagination import Cursored, Filtered, PageRequest, ParamValue, build_url, next_cursor

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class ApiResponse(Generic[T]):
    """Uniform envelope returned by every read and write call."""

    data: T
    next_cursor: Optional[str] = None


@dataclass(slots=True)
class GreenhouseClient:
    """Authenticated client for the Harvest API."""

    token_manager: TokenManager
    base_url: str = DEFAULT_BASE_URL
    session: requests.Session = field(default_factory=requests.Session)
    timeout: float | None = None

    @classmethod
    def from_config(cls, config: GreenhouseConfig) -> "GreenhouseClient":
        session = requests.Session()
        token_manager = TokenManager(
            Credentials(config.client_id, config.client_secret),
            token_url=config.token_url,
            session=session,
            timeout=config.timeout,
        )
        return cls(
            token_manager=token_manager,
            base_url=config.base_url,
            session=session,
            timeout=config.timeout,
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def get(self, path: str, params: Optional[Mapping[str, ParamValue]] = None) -> ApiResponse[Any]:
        """Fetch the first (or only) page of a resource, applying filters."""
        url = build_url(self.base_url, path, params)
        return self._read(url)

    def get_by_cursor(self, path: str, cursor: str) -> ApiResponse[Any]:
        """Fetch a continuation page; ``cursor`` is the only query parameter."""
        url = build_url(self.base_url, path, {"cursor": cursor})
        return self._read(url)

    def fetch_page(self, path: str, request: PageRequest) -> ApiResponse[Any]:
        if isinstance(request, Cursored):
            return self.get_by_cursor(path, request.cursor)
        if isinstance(request, Filtered):
            return self.get(path, request.params)
        raise GreenhouseError(f"Unsupported page request: {request!r}")

    def post(self, path: str, body: Optional[Mapping[str, Any]] = None) -> ApiResponse[Any]:
        """Send a write request. Writes are never paginated."""
        url = build_url(self.base_url, path)
        response = self._send("POST", url, body=body)

        # Some write endpoints answer 204 No Content.
        if response.status_code == 204:
            return ApiResponse(data={}, next_cursor=None)
        return ApiResponse(data=self._decode(response, url), next_cursor=None)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _read(self, url: str) -> ApiResponse[Any]:
        response = self._send("GET", url)
        data = self._decode(response, url)
        return ApiResponse(data=data, next_cursor=next_cursor(response))

    def _send(
        self,
        method: str,
        url: str,
        *,
        body: Optional[Mapping[str, Any]] = None,
    ) -> requests.Response:
        token = self.token_manager.ensure_token()
        headers = {
            "Authorization": f"Bearer {token}",
            "Accept": "application/json",
        }
        data = None
        if method == "POST":
            headers["Content-Type"] = "application/json"
            if body is not None:
                data = json.dumps(body).encode("utf-8")

        LOGGER.debug("%s %s", method, url)
        try:
            response = self.session.request(method, url, headers=headers, data=data, timeout=self.timeout)
        except requests.RequestException as exc:
            raise ApiConnectionError(str(exc), url) from exc

        if not 200 <= response.status_code < 300:
            LOGGER.warning("%s %s failed with status %s", method, url, response.status_code)
            raise ApiError(response.status_code, response.reason, response.text, url)
        return response

    @staticmethod
    def _decode(response: requests.Response, url: str) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            LOGGER.debug("Invalid JSON payload from %s: %s", url, response.text)
            raise ApiError(
                response.status_code,
                "Invalid JSON response",
                response.text,
                url,
            ) from exc


__all__ = ["ApiResponse", "GreenhouseClient"]
