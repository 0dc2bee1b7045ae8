"""Shared fakes for exercising the Greenhouse request layer without a network."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import pytest
import requests

from greenhouse_mcp.auth import Credentials, TokenCache, TokenManager
from greenhouse_mcp.client import GreenhouseClient

TOKEN_URL = "https://auth.example.test/token"
BASE_URL = "https://harvest.example.test/v3"
NOW = 1_700_000_000.0


def make_response(
    status_code: int = 200,
    payload: Any = None,
    *,
    text: Optional[str] = None,
    reason: str = "OK",
    headers: Optional[Dict[str, str]] = None,
) -> requests.Response:
    response = requests.Response()
    response.status_code = status_code
    response.reason = reason
    response.encoding = "utf-8"
    if text is not None:
        response._content = text.encode("utf-8")
    elif payload is not None:
        response._content = json.dumps(payload).encode("utf-8")
    else:
        response._content = b""
    response.headers.update(headers or {})
    return response


@dataclass
class RecordedCall:
    method: str
    url: str
    headers: Dict[str, str]
    data: Any
    timeout: Any


@dataclass
class FakeSession:
    """Stand-in for ``requests.Session`` replaying queued responses."""

    responses: List[Any] = field(default_factory=list)
    calls: List[RecordedCall] = field(default_factory=list)

    def queue(self, *responses: Any) -> "FakeSession":
        self.responses.extend(responses)
        return self

    def request(self, method, url, headers=None, data=None, timeout=None):
        self.calls.append(RecordedCall(method, url, dict(headers or {}), data, timeout))
        if not self.responses:
            raise AssertionError(f"Unexpected request: {method} {url}")
        result = self.responses.pop(0)
        if isinstance(result, Exception):
            raise result
        return result


class FakeClock:
    def __init__(self, now: float = NOW) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def session() -> FakeSession:
    return FakeSession()


@pytest.fixture()
def token_manager(session: FakeSession, clock: FakeClock) -> TokenManager:
    return TokenManager(
        Credentials("client-id", "client-secret"),
        token_url=TOKEN_URL,
        session=session,
        clock=clock,
    )


@pytest.fixture()
def client(token_manager: TokenManager, session: FakeSession, clock: FakeClock) -> GreenhouseClient:
    # Pre-seed a token that stays valid for an hour so tests only see resource calls.
    token_manager._cache = TokenCache(value="cached-token", expires_at_ms=int((clock.now + 3600) * 1000))
    return GreenhouseClient(token_manager=token_manager, base_url=BASE_URL, session=session)
