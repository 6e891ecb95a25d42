# tests/conftest.py
"""
Shared fixtures.

Nothing here talks to a real Kriptty server.  The `api` fixture is a fake
backend plugged into httpx.MockTransport: tests register canned answers per
(method, path) and afterwards inspect the requests the client actually sent.
"""

import json

import httpx
import pytest

from kriptty.client import KripttyClient
from kriptty.config import Settings, reset_settings

API_URL = "https://api.test/v1/"
API_TOKEN = "test-token"


class FakeKripttyApi:
    """Canned answers keyed by (method, path relative to /v1)."""

    prefix = "/v1"

    def __init__(self):
        self.routes = {}
        self.requests = []

    def add(self, method, path, json_body=None, status=200, text=None):
        self.routes[(method, path)] = (status, json_body, text)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path.removeprefix(self.prefix)
        route = self.routes.get((request.method, path))
        if route is None:
            raise AssertionError(f"unexpected request: {request.method} {path}")
        status, json_body, text = route
        if text is not None:
            return httpx.Response(status, text=text)
        return httpx.Response(status, json=json_body)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def last_json(self):
        content = self.last.content
        return json.loads(content) if content else None


@pytest.fixture
def api():
    return FakeKripttyApi()


@pytest.fixture
def settings():
    return Settings(api_url=API_URL, api_token=API_TOKEN)


@pytest.fixture
def client(api, settings):
    return KripttyClient(settings, transport=httpx.MockTransport(api.handler))


@pytest.fixture(autouse=True)
def _fresh_settings():
    reset_settings()
    yield
    reset_settings()
