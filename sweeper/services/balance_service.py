"""
Wallet balance proxies — 1inch (EVM) and Helius (Solana).

Keeps provider API keys server-side and sidesteps browser CORS limits.
Helius balance lookups are cached in Redis for a short TTL when a
cache is configured; cache faults never fail the request.
"""

import json
import logging
from typing import Any

import httpx
from redis.exceptions import RedisError

from sweeper.config import settings
from sweeper.core.errors import ProxyError

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

ONEINCH_PRIMARY_URL = "https://balances.1inch.io/v1.2/{chain_id}/balances/{wallet}"
ONEINCH_FALLBACK_URL = "https://api.1inch.dev/balance/v1.2/{chain_id}/balances/{wallet}"

HELIUS_RPC_REQUEST_ID = "token-sweep"
HELIUS_ASSET_PAGE_LIMIT = 1000

BALANCE_CACHE_KEY_PREFIX = "helius:balances:"


class BalanceService:
    """Fetches raw wallet balances from 1inch and Helius."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        redis=None,
        helius_api_key: str | None = None,
        cache_ttl_seconds: int | None = None,
    ):
        self.client = client
        self.redis = redis
        self.helius_api_key = (
            settings.HELIUS_API_KEY if helius_api_key is None else helius_api_key
        )
        self.cache_ttl_seconds = (
            settings.BALANCE_CACHE_TTL_SECONDS
            if cache_ttl_seconds is None
            else cache_ttl_seconds
        )

    # --- 1inch ---

    async def get_evm_balances(self, chain_id: str, wallet: str) -> Any:
        """
        Return the 1inch ``{token_address: raw_balance}`` map for a wallet.

        Tries the public balances host first and the developer portal host
        if that answers non-2xx. When both fail, the primary status is
        reported.
        """
        try:
            resp = await self.client.get(
                ONEINCH_PRIMARY_URL.format(chain_id=chain_id, wallet=wallet)
            )
            if resp.is_success:
                return resp.json()

            alt = await self.client.get(
                ONEINCH_FALLBACK_URL.format(chain_id=chain_id, wallet=wallet)
            )
            if alt.is_success:
                return alt.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.error("1inch proxy error: %r", exc)
            raise ProxyError(500, "Failed to fetch balances")

        logger.warning(
            "1inch balances failed: primary=%s fallback=%s",
            resp.status_code, alt.status_code,
        )
        raise ProxyError(resp.status_code, f"1inch API error: {resp.status_code}")

    # --- Helius ---

    def _require_helius_key(self) -> str:
        if not self.helius_api_key:
            raise ProxyError(500, "Helius API key not configured")
        return self.helius_api_key

    async def get_solana_balances(self, wallet: str) -> Any:
        """Return Helius token balances for a Solana wallet (cached briefly)."""
        api_key = self._require_helius_key()

        cached = await self._cache_get(wallet)
        if cached is not None:
            return cached

        url = f"{settings.HELIUS_BASE_URL}/addresses/{wallet}/balances"
        try:
            resp = await self.client.get(url, params={"api-key": api_key})
            if not resp.is_success:
                logger.error("Helius API error: %s %s", resp.status_code, resp.text)
                raise ProxyError(resp.status_code, f"Helius API error: {resp.status_code}")
            data = resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.error("Helius proxy error: %r", exc)
            raise ProxyError(500, "Failed to fetch balances")

        await self._cache_set(wallet, data)
        return data

    async def get_solana_assets(self, wallet: str) -> Any:
        """Return the DAS ``getAssetsByOwner`` result, fungibles and SOL included."""
        api_key = self._require_helius_key()

        payload = {
            "jsonrpc": "2.0",
            "id": HELIUS_RPC_REQUEST_ID,
            "method": "getAssetsByOwner",
            "params": {
                "ownerAddress": wallet,
                "page": 1,
                "limit": HELIUS_ASSET_PAGE_LIMIT,
                "displayOptions": {
                    "showFungible": True,
                    "showNativeBalance": True,
                },
            },
        }
        try:
            resp = await self.client.post(
                settings.HELIUS_RPC_URL,
                params={"api-key": api_key},
                json=payload,
            )
            if not resp.is_success:
                logger.error("Helius DAS API error: %s %s", resp.status_code, resp.text)
                raise ProxyError(resp.status_code, f"Helius API error: {resp.status_code}")
            return resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.error("Helius DAS proxy error: %r", exc)
            raise ProxyError(500, "Failed to fetch assets")

    # --- Cache helpers ---

    async def _cache_get(self, wallet: str) -> Any:
        if self.redis is None:
            return None
        try:
            cached = await self.redis.get(f"{BALANCE_CACHE_KEY_PREFIX}{wallet}")
        except RedisError as exc:
            logger.warning("Balance cache read failed: %s", exc)
            return None
        return json.loads(cached) if cached is not None else None

    async def _cache_set(self, wallet: str, data: Any) -> None:
        if self.redis is None or self.cache_ttl_seconds <= 0:
            return
        try:
            await self.redis.setex(
                f"{BALANCE_CACHE_KEY_PREFIX}{wallet}",
                self.cache_ttl_seconds,
                json.dumps(data),
            )
        except RedisError as exc:
            logger.warning("Balance cache write failed: %s", exc)
