"""
Shared test fixtures for the token sweeper.

Provides an async test client with the outbound httpx client replaced by
an ``httpx.MockTransport`` stub, a fixed quote configuration, and a Redis
mock for the balance cache.
"""

from unittest.mock import AsyncMock

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from sweeper.api.deps import get_http_client, get_quote_config, get_redis
from sweeper.config import FeePolicy, QuoteConfig

TREASURY = "0xe6e7d3c6379ad80de02f26ccc72605d0f70d5201"
USDC_BASE = "0x833589fcd6edb6e08f4c7c32d4f71b54bda02913"
WETH_BASE = "0x4200000000000000000000000000000000000006"
TAKER = "0x1111111111111111111111111111111111111111"


# --- Upstream stub ---


class UpstreamStub:
    """
    Callable handler for ``httpx.MockTransport``.

    Routes are matched by URL prefix, first registered first. Each route
    holds a queue of responses; the last one repeats once the queue runs
    dry. A queued exception is raised instead of answering.
    """

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self._routes: list[tuple[str, list]] = []

    def _queue(self, url_prefix: str) -> list:
        for prefix, queue in self._routes:
            if prefix == url_prefix:
                return queue
        queue = []
        self._routes.append((url_prefix, queue))
        return queue

    def add(self, url_prefix: str, status_code: int = 200, **kwargs) -> None:
        """Queue a response (``json=``, ``content=``, ...) for a URL prefix."""
        self._queue(url_prefix).append((status_code, kwargs))

    def fail(self, url_prefix: str, exc: Exception) -> None:
        """Queue a transport failure for a URL prefix."""
        self._queue(url_prefix).append(exc)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        for prefix, queue in self._routes:
            if str(request.url).startswith(prefix):
                spec = queue.pop(0) if len(queue) > 1 else queue[0]
                if isinstance(spec, Exception):
                    raise spec
                status_code, kwargs = spec
                return httpx.Response(status_code, **kwargs)
        return httpx.Response(404, json={"message": "no stub for this URL"})

    def urls(self) -> list[str]:
        return [str(r.url) for r in self.requests]


@pytest.fixture
def upstream():
    """Fresh upstream stub per test."""
    return UpstreamStub()


@pytest_asyncio.fixture
async def upstream_client(upstream):
    """httpx client whose requests are answered by the upstream stub."""
    async with httpx.AsyncClient(transport=httpx.MockTransport(upstream)) as c:
        yield c


# --- Configuration ---


@pytest.fixture
def fee_policy():
    return FeePolicy(fee_bps=5, fee_recipient=TREASURY, default_slippage_bps=30)


@pytest.fixture
def quote_config(fee_policy):
    return QuoteConfig(api_key="test-0x-key", fee_policy=fee_policy)


# --- Mock Redis ---


@pytest.fixture
def mock_redis():
    """AsyncMock Redis client with the methods the balance cache uses."""
    redis = AsyncMock()
    redis.get = AsyncMock(return_value=None)
    redis.setex = AsyncMock()
    return redis


# --- Dependency Override Helpers ---


@pytest_asyncio.fixture
async def client(upstream_client, quote_config, mock_redis):
    """
    Async HTTP test client with the outbound client, quote config and
    Redis overridden to use test doubles.
    """
    from sweeper.main import app

    async def override_get_http_client():
        return upstream_client

    async def override_get_quote_config():
        return quote_config

    async def override_get_redis():
        return mock_redis

    app.dependency_overrides[get_http_client] = override_get_http_client
    app.dependency_overrides[get_quote_config] = override_get_quote_config
    app.dependency_overrides[get_redis] = override_get_redis

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# --- Sample Data ---


@pytest.fixture
def sample_quote_params():
    """Typical sweeper quote request: sell USDC for WETH on Base."""
    return {
        "chainId": "8453",
        "sellToken": USDC_BASE,
        "buyToken": WETH_BASE,
        "sellAmount": "1000000",
        "taker": TAKER,
    }
