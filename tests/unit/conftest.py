"""
Shared fixtures for unit tests
"""

import inspect
import json
from dataclasses import dataclass
from http import HTTPStatus
from typing import Any, Callable, Dict, List, Optional, Union

import pytest
import requests
from requests.structures import CaseInsensitiveDict


BASE_URL = "https://api.example.test"


def make_response(
    status_code: int = 200,
    body: Union[str, bytes] = b"",
    content_type: Optional[str] = None,
    url: str = BASE_URL,
    reason: Optional[str] = None,
) -> requests.Response:
    """Build a requests.Response without touching the network"""
    response = requests.Response()
    response.status_code = status_code
    response._content = body.encode("utf-8") if isinstance(body, str) else body
    response.headers = CaseInsensitiveDict()
    if content_type is not None:
        response.headers["Content-Type"] = content_type
    response.reason = reason if reason is not None else HTTPStatus(status_code).phrase
    response.url = url
    response.encoding = "utf-8"
    return response


def json_response(data: Any, status_code: int = 200) -> requests.Response:
    return make_response(status_code, json.dumps(data), "application/json")


@dataclass
class SentRequest:
    method: str
    url: str
    headers: Dict[str, str]
    body: Optional[Any]


Handler = Callable[[SentRequest], Any]


class FakeTransport:
    """
    In-memory transport recording every request

    The handler returns a response (or an awaitable resolving to one);
    returning an exception instance makes the transport raise it.
    """

    def __init__(self, handler: Optional[Handler] = None) -> None:
        self.handler = handler or (lambda sent: json_response({}))
        self.calls: List[SentRequest] = []

    async def perform(self, method, url, headers, body=None):
        sent = SentRequest(method=method, url=url, headers=dict(headers), body=body)
        self.calls.append(sent)
        result = self.handler(sent)
        if inspect.isawaitable(result):
            result = await result
        if isinstance(result, BaseException):
            raise result
        return result


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()
