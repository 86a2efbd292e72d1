"""Shared fakes for unit tests. Nothing here touches the network."""

import json
from dataclasses import dataclass, field
from typing import Any, Optional

import pytest

from codeforces_client.config import ClientConfig
from codeforces_client.infrastructure.http_client import HTTPResponse
from codeforces_client.infrastructure.session import AuthSession


@dataclass
class RecordedCall:
    method: str
    url: str
    params: Optional[dict] = None
    data: Optional[dict] = None
    headers: dict = field(default_factory=dict)
    cookies: Any = None
    allow_redirects: bool = True
    max_size: Optional[int] = None


class FakeHTTPClient:
    """Scripted HTTP client: returns queued responses or raises queued exceptions."""

    def __init__(self, *responses: Any):
        self.queue: list[Any] = list(responses)
        self.calls: list[RecordedCall] = []
        self.closed = False

    def push(self, *responses: Any) -> None:
        self.queue.extend(responses)

    async def request(
        self,
        method: str,
        url: str,
        *,
        params=None,
        data=None,
        headers=None,
        cookies=None,
        allow_redirects: bool = True,
        max_size: Optional[int] = None,
    ) -> HTTPResponse:
        self.calls.append(
            RecordedCall(
                method=method,
                url=url,
                params=dict(params) if params is not None else None,
                data=dict(data) if data is not None else None,
                headers=dict(headers or {}),
                cookies=dict(cookies) if cookies is not None else None,
                allow_redirects=allow_redirects,
                max_size=max_size,
            )
        )
        if not self.queue:
            raise AssertionError(f"unexpected request: {method} {url}")

        item = self.queue.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item

    async def close(self) -> None:
        self.closed = True


def make_response(
    body: str | bytes = "",
    status_code: int = 200,
    headers: Optional[dict[str, str]] = None,
    cookies: Optional[dict[str, str]] = None,
    url: str = "",
    truncated: bool = False,
) -> HTTPResponse:
    content = body.encode("utf-8") if isinstance(body, str) else body
    return HTTPResponse(
        status_code=status_code,
        content=content,
        headers=headers or {},
        url=url,
        cookies=cookies or {},
        truncated=truncated,
    )


def make_api_response(result: Any = None, status: str = "OK", comment: Optional[str] = None) -> HTTPResponse:
    payload: dict[str, Any] = {"status": status}
    if comment is not None:
        payload["comment"] = comment
    if status == "OK":
        payload["result"] = result
    return make_response(json.dumps(payload))


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 0.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def respond():
    return make_response


@pytest.fixture
def api_respond():
    return make_api_response


@pytest.fixture
def fake_http():
    return FakeHTTPClient()


@pytest.fixture
def config():
    return ClientConfig()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def session(fake_http, config):
    """Logged-in session for handle ``tourist`` backed by ``fake_http``."""
    auth = AuthSession(fake_http, config, handle="tourist")
    auth.set_cookie("JSESSIONID=session-id; 39ce7=ce7-value")
    return auth
