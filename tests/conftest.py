#  StyleMirror Gateway - Test Fixtures
#
#  Shared fixtures for the test suite.
#  Uses DI container overrides instead of monkey-patching singletons.
#
#  Depends on: gateway/container.py, gateway/app.py, gateway/services/counter_store.py,
#              gateway/forwarders/base.py
#  Used by:    all test files

import json
from unittest.mock import AsyncMock

import httpx
import pytest
from dependency_injector import providers
from starlette.requests import Request
from starlette.responses import JSONResponse

from gateway.forwarders.base import Forwarder
from gateway.models.enums import RouteKind
from gateway.services.counter_store import MemoryCounterStore


# ---------------------------------------------------------------------------
# Clock / store fixtures
# ---------------------------------------------------------------------------

class FakeClock:
    """Settable clock usable for both wall time and monotonic time."""

    def __init__(self, now: float = 1702512000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def memory_store(clock):
    return MemoryCounterStore(clock=clock)


# ---------------------------------------------------------------------------
# Request / upstream helpers
# ---------------------------------------------------------------------------

def make_request(
    method: str = "GET",
    path: str = "/",
    query: str = "",
    headers: dict | None = None,
    body: bytes | dict | None = None,
) -> Request:
    """Build a Starlette Request without a running server."""
    if isinstance(body, dict):
        body = json.dumps(body).encode()
    body = body or b""
    raw_headers = [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()]
    scope = {
        "type": "http",
        "http_version": "1.1",
        "method": method,
        "scheme": "http",
        "server": ("test", 80),
        "path": path,
        "raw_path": path.encode(),
        "root_path": "",
        "query_string": query.encode(),
        "headers": raw_headers,
    }
    sent = False

    async def receive():
        nonlocal sent
        if sent:
            return {"type": "http.disconnect"}
        sent = True
        return {"type": "http.request", "body": body, "more_body": False}

    return Request(scope, receive)


def upstream_response(status_code: int = 200, json_body=None, content: bytes | None = None,
                      headers: dict | None = None) -> httpx.Response:
    """Real httpx.Response so .json()/.content/.headers behave like production."""
    if json_body is not None:
        return httpx.Response(status_code, json=json_body, headers=headers)
    return httpx.Response(status_code, content=content or b"", headers=headers)


@pytest.fixture
def mock_http():
    """Mocked shared httpx.AsyncClient. Tests set .request return values."""
    client = AsyncMock(spec=httpx.AsyncClient)
    client.request = AsyncMock(return_value=upstream_response(json_body={"ok": True}))
    client.aclose = AsyncMock()
    return client


# ---------------------------------------------------------------------------
# FastAPI client fixture
# ---------------------------------------------------------------------------

@pytest.fixture
async def app_client(mock_http, clock):
    """ASGI client against the real app with a fresh in-memory store.

    ASGITransport does not run the lifespan, so config validation and
    client shutdown are skipped here.

    Uses explicit try/finally with reset_override() so DI state is cleaned
    up even when a test fails mid-request.
    """
    from httpx import ASGITransport, AsyncClient
    from gateway.app import app, container
    from gateway.services.cors import CorsPolicy
    from gateway.services.rate_limiter import RateLimiter

    store = MemoryCounterStore(clock=clock)

    container.http_client.override(providers.Object(mock_http))
    container.counter_store.override(providers.Object(store))
    container.rate_limiter.override(providers.Factory(RateLimiter, store=store, clock=clock))
    container.cors.override(providers.Object(CorsPolicy(["https://a.com", "https://b.com"])))

    try:
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            client.store = store
            yield client
    finally:
        container.http_client.reset_override()
        container.counter_store.reset_override()
        container.rate_limiter.reset_override()
        container.cors.reset_override()


# ---------------------------------------------------------------------------
# Forwarder stubs
# ---------------------------------------------------------------------------

class StubForwarder(Forwarder):
    """Records calls and returns a canned response or raises."""

    def __init__(self, name: str, response=None, error: Exception | None = None):
        self.name = name
        self.calls = []
        self._response = response
        self._error = error

    async def forward(self, request, sub_path=None):
        self.calls.append((request.method, request.url.path, sub_path))
        if self._error is not None:
            raise self._error
        if self._response is not None:
            return self._response
        return JSONResponse({"route": self.name})


def stub_forwarders(overrides: dict | None = None) -> dict:
    stubs = {kind: StubForwarder(kind.value) for kind in RouteKind}
    stubs.update(overrides or {})
    return stubs
