"""Shared fixtures: a recording fake of the Opsgenie HTTP API."""

import json
from typing import Any, Dict, List, Optional, Tuple

import httpx
import pytest

from opsgenie_mcp.auth import API_KEY_ENV_VAR


class FakeOpsgenie:
    """
    Stand-in for api.opsgenie.com.

    Register canned responses per (method, path) with respond(); every
    request that reaches the fake is kept in .requests for assertions.
    """

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self._routes: Dict[Tuple[str, str], httpx.Response] = {}

    def respond(
        self,
        method: str,
        path: str,
        status: int = 200,
        json_body: Any = None,
        text: Optional[str] = None,
    ) -> None:
        if text is not None:
            response = httpx.Response(status, text=text)
        elif json_body is not None:
            response = httpx.Response(status, json=json_body)
        else:
            response = httpx.Response(status)
        self._routes[(method.upper(), path)] = response

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self._routes.get((request.method, request.url.path))
        if response is None:
            return httpx.Response(404, json={"message": "no fake route"})
        return response

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    @property
    def last_request(self) -> httpx.Request:
        assert self.requests, "no request reached the fake Opsgenie API"
        return self.requests[-1]

    def last_json(self) -> Dict[str, Any]:
        return json.loads(self.last_request.content)


@pytest.fixture
def accepted_body():
    """Typical 202 body for mutating alert calls."""
    return {"result": "Request will be processed", "took": 0.1, "requestId": "req-123"}


@pytest.fixture
def fake_opsgenie():
    """Fake Opsgenie API with no routes registered."""
    return FakeOpsgenie()


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep host environment settings out of the tests."""
    for name in (
        API_KEY_ENV_VAR,
        "OPSGENIE_API_URL",
        "OPSGENIE_TIMEOUT",
        "OPSGENIE_MCP_HOST",
        "OPSGENIE_MCP_PORT",
        "OPSGENIE_MCP_TRANSPORT",
        "OPSGENIE_MCP_JSON_RESPONSE",
        "OPSGENIE_MCP_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
