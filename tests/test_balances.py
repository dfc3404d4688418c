"""Tests for the 1inch and Helius balance proxies."""

import json
from unittest.mock import AsyncMock

import httpx
import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from sweeper.config import settings
from sweeper.services.balance_service import BALANCE_CACHE_KEY_PREFIX

WALLET = "0x1111111111111111111111111111111111111111"
SOL_WALLET = "86xCnPeV69n6t3DnyGvkKobf9FdN2H9oiVDdaMpo2MMY"
ONEINCH_PRIMARY = "https://balances.1inch.io/v1.2/8453/balances/"
ONEINCH_FALLBACK = "https://api.1inch.dev/balance/v1.2/8453/balances/"
HELIUS_BALANCES = f"https://api.helius.xyz/v0/addresses/{SOL_WALLET}/balances"
HELIUS_RPC = "https://mainnet.helius-rpc.com/"


@pytest.fixture
def helius_key(monkeypatch):
    monkeypatch.setattr(settings, "HELIUS_API_KEY", "test-helius-key")
    return "test-helius-key"


# ---------------------------------------------------------------------------
# GET /api/1inch/balances
# ---------------------------------------------------------------------------


class TestOneInchBalances:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("query", [{}, {"chainId": "8453"}, {"wallet": WALLET}])
    async def test_missing_params(self, client, upstream, query):
        response = await client.get("/api/1inch/balances", params=query)
        assert response.status_code == 400
        assert response.json() == {"error": "Missing chainId or wallet parameter"}
        assert upstream.requests == []

    @pytest.mark.asyncio
    async def test_primary_success(self, client, upstream):
        balances = {"0x833589fcd6edb6e08f4c7c32d4f71b54bda02913": "2500000"}
        upstream.add(ONEINCH_PRIMARY, 200, json=balances)

        response = await client.get(
            "/api/1inch/balances", params={"chainId": "8453", "wallet": WALLET},
        )

        assert response.status_code == 200
        assert response.json() == balances
        assert len(upstream.requests) == 1

    @pytest.mark.asyncio
    async def test_falls_back_to_dev_portal(self, client, upstream):
        upstream.add(ONEINCH_PRIMARY, 503, json={})
        upstream.add(ONEINCH_FALLBACK, 200, json={"0xabc": "1"})

        response = await client.get(
            "/api/1inch/balances", params={"chainId": "8453", "wallet": WALLET},
        )

        assert response.status_code == 200
        assert response.json() == {"0xabc": "1"}
        assert upstream.urls()[1].startswith(ONEINCH_FALLBACK)

    @pytest.mark.asyncio
    async def test_both_fail_reports_primary_status(self, client, upstream):
        upstream.add(ONEINCH_PRIMARY, 503, json={})
        upstream.add(ONEINCH_FALLBACK, 401, json={})

        response = await client.get(
            "/api/1inch/balances", params={"chainId": "8453", "wallet": WALLET},
        )

        assert response.status_code == 503
        assert response.json() == {"error": "1inch API error: 503"}

    @pytest.mark.asyncio
    async def test_network_failure(self, client, upstream):
        upstream.fail(ONEINCH_PRIMARY, httpx.ConnectError("Connection refused"))

        response = await client.get(
            "/api/1inch/balances", params={"chainId": "8453", "wallet": WALLET},
        )

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to fetch balances"}


# ---------------------------------------------------------------------------
# GET /api/helius/balances
# ---------------------------------------------------------------------------


class TestHeliusBalances:

    @pytest.mark.asyncio
    async def test_missing_wallet(self, client, helius_key):
        response = await client.get("/api/helius/balances")
        assert response.status_code == 400
        assert response.json() == {"error": "Wallet address required"}

    @pytest.mark.asyncio
    async def test_missing_api_key(self, client, upstream, monkeypatch):
        monkeypatch.setattr(settings, "HELIUS_API_KEY", "")

        response = await client.get("/api/helius/balances", params={"wallet": SOL_WALLET})

        assert response.status_code == 500
        assert response.json() == {"error": "Helius API key not configured"}
        assert upstream.requests == []

    @pytest.mark.asyncio
    async def test_fetches_and_caches(self, client, upstream, mock_redis, helius_key):
        body = {"tokens": [{"mint": "So11111111111111111111111111111111111111112"}]}
        upstream.add(HELIUS_BALANCES, 200, json=body)

        response = await client.get("/api/helius/balances", params={"wallet": SOL_WALLET})

        assert response.status_code == 200
        assert response.json() == body
        assert upstream.requests[0].url.params["api-key"] == helius_key
        mock_redis.setex.assert_called_once_with(
            f"{BALANCE_CACHE_KEY_PREFIX}{SOL_WALLET}", 30, json.dumps(body),
        )

    @pytest.mark.asyncio
    async def test_cache_hit_skips_upstream(self, client, upstream, mock_redis, helius_key):
        cached = {"tokens": [], "nativeBalance": 42}
        mock_redis.get = AsyncMock(return_value=json.dumps(cached))

        response = await client.get("/api/helius/balances", params={"wallet": SOL_WALLET})

        assert response.status_code == 200
        assert response.json() == cached
        assert upstream.requests == []
        mock_redis.setex.assert_not_called()

    @pytest.mark.asyncio
    async def test_cache_failure_is_ignored(self, client, upstream, mock_redis, helius_key):
        mock_redis.get = AsyncMock(side_effect=RedisConnectionError("down"))
        mock_redis.setex = AsyncMock(side_effect=RedisConnectionError("down"))
        upstream.add(HELIUS_BALANCES, 200, json={"tokens": []})

        response = await client.get("/api/helius/balances", params={"wallet": SOL_WALLET})

        assert response.status_code == 200
        assert response.json() == {"tokens": []}

    @pytest.mark.asyncio
    async def test_upstream_error_status(self, client, upstream, mock_redis, helius_key):
        upstream.add(HELIUS_BALANCES, 429, text="rate limited")

        response = await client.get("/api/helius/balances", params={"wallet": SOL_WALLET})

        assert response.status_code == 429
        assert response.json() == {"error": "Helius API error: 429"}
        mock_redis.setex.assert_not_called()


# ---------------------------------------------------------------------------
# POST /api/helius/assets
# ---------------------------------------------------------------------------


class TestHeliusAssets:

    @pytest.mark.asyncio
    async def test_missing_wallet(self, client, helius_key):
        response = await client.post("/api/helius/assets", json={})
        assert response.status_code == 400
        assert response.json() == {"error": "Wallet address required"}

    @pytest.mark.asyncio
    async def test_das_request(self, client, upstream, helius_key):
        rpc_result = {"jsonrpc": "2.0", "id": "token-sweep", "result": {"items": []}}
        upstream.add(HELIUS_RPC, 200, json=rpc_result)

        response = await client.post("/api/helius/assets", json={"wallet": SOL_WALLET})

        assert response.status_code == 200
        assert response.json() == rpc_result
        sent = json.loads(upstream.requests[0].content)
        assert sent["method"] == "getAssetsByOwner"
        assert sent["params"]["ownerAddress"] == SOL_WALLET
        assert sent["params"]["limit"] == 1000
        assert sent["params"]["displayOptions"] == {
            "showFungible": True,
            "showNativeBalance": True,
        }

    @pytest.mark.asyncio
    async def test_network_failure(self, client, upstream, helius_key):
        upstream.fail(HELIUS_RPC, httpx.ConnectError("Connection refused"))

        response = await client.post("/api/helius/assets", json={"wallet": SOL_WALLET})

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to fetch assets"}
