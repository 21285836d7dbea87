"""
Configuration for pytest.

Shared fixtures for the pushnotifier tests. HTTP traffic never leaves the
process: ``http_session`` is a real ``requests.Session`` whose ``request``
method is replaced with a MagicMock.
"""

import json
from typing import Any, Callable, Optional
from unittest.mock import MagicMock, patch

import pytest
import requests

from pushnotifier.client import PushNotifier

PACKAGE_NAME = "dev.myapp.pn"
API_TOKEN = "aabbccdd112233"
NOW = 1_700_000_000


def build_response(
    status: int = 200,
    json_data: Any = None,
    text: Optional[str] = None,
    reason: str = "OK",
) -> MagicMock:
    """Create a mock ``requests.Response``."""
    response = MagicMock(spec=requests.Response)
    response.status_code = status
    response.reason = reason
    if text is None:
        text = json.dumps(json_data) if json_data is not None else ""
    response.text = text
    response.json.return_value = json_data
    return response


@pytest.fixture
def make_response() -> Callable[..., MagicMock]:
    return build_response


@pytest.fixture
def http_session() -> requests.Session:
    session = requests.Session()
    session.request = MagicMock()
    return session


@pytest.fixture
def frozen_time():
    """Pin ``time.time()`` to ``NOW``."""
    with patch("pushnotifier.tokens.time.time", return_value=float(NOW)) as mocked:
        yield mocked


@pytest.fixture
def client(http_session) -> PushNotifier:
    """Client that has not logged in yet."""
    return PushNotifier(PACKAGE_NAME, API_TOKEN, session=http_session)


@pytest.fixture
def authed_client(http_session) -> PushNotifier:
    """Client holding a caller-supplied app token, which never needs refreshing."""
    return PushNotifier(PACKAGE_NAME, API_TOKEN, "preset-app-token", session=http_session)


def login_body(app_token: str = "ZZXX11ff", expires_at: int = NOW + 30 * 24 * 3600) -> dict:
    return {
        "username": "aUser",
        "avatar": "https://example.com/avatar.png",
        "app_token": app_token,
        "expires_at": expires_at,
    }


@pytest.fixture
def make_login_body() -> Callable[..., dict]:
    return login_body


def sent_json(http_session, call_index: int = -1) -> Any:
    """JSON body of a recorded request."""
    return http_session.request.call_args_list[call_index].kwargs.get("json")


@pytest.fixture
def request_body() -> Callable[..., Any]:
    return sent_json
