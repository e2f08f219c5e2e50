"""
Shared fixtures: a scripted booking API behind httpx.MockTransport.
"""
import json

import httpx
import pytest

from core.cache import cache_invalidate_multi
from core.http import ApiClient
from core.session import AuthSession

BASE_URL = "http://booking.test"
POOLS = ["org", "plans", "catalog", "analytics", "context"]


class MockApi:
    """Answers requests from a (method, path) table and records every request."""

    def __init__(self):
        self.routes = {}
        self.requests = []

    def add(self, method: str, path: str, body=None, status: int = 200, handler=None):
        self.routes[(method, path)] = handler or (status, body)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json={"message": "Not found"})
        if callable(route):
            return route(request)
        status, body = route
        if body is None:
            return httpx.Response(status)
        return httpx.Response(status, json=body)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)

    def calls(self, method: str, path: str) -> list:
        return [r for r in self.requests if r.method == method and r.url.path == path]

    def json_bodies(self, method: str, path: str) -> list:
        return [json.loads(r.content) for r in self.calls(method, path)]

    def client(self, session=None, **kwargs) -> ApiClient:
        return ApiClient(
            session=session or AuthSession.from_token("token-123", organization_id="org-1"),
            base_url=BASE_URL,
            tenant_domain=kwargs.pop("tenant_domain", "salon.agenditapp.com"),
            transport=self.transport,
            **kwargs,
        )


@pytest.fixture(autouse=True)
def clear_caches():
    cache_invalidate_multi(POOLS)
    yield
    cache_invalidate_multi(POOLS)


@pytest.fixture
def mock_api():
    return MockApi()


@pytest.fixture
async def api(mock_api):
    client = mock_api.client()
    yield client
    await client.close()
