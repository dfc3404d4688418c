"""
CoinGecko batch token pricing.

Looks up USD prices for many contract addresses on one chain, splitting
the list into batches of 50 (the limit that also works on free keys).
A rate-limited batch (HTTP 429) is retried once after a short pause;
any other batch failure is noted in the logs and skipped.
"""

import asyncio
import logging

import httpx

from sweeper.config import settings
from sweeper.core.errors import ProxyError

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

# EVM chain id -> CoinGecko asset platform id
COINGECKO_PLATFORM_IDS: dict[int, str] = {
    1: "ethereum",
    8453: "base",
    42161: "arbitrum-one",
    10: "optimistic-ethereum",
    137: "polygon-pos",
    56: "binance-smart-chain",
    43114: "avalanche",
    534352: "scroll",
    59144: "linea",
}

COINGECKO_TOKEN_PRICE_URL = (
    "https://pro-api.coingecko.com/api/v3/simple/token_price/{platform_id}"
)

BATCH_SIZE = 50
RATE_LIMIT_BACKOFF_SECONDS = 2.0
BATCH_DELAY_SECONDS = 0.2


class PriceService:
    """Batched USD price lookups against the CoinGecko Pro API."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        api_key: str | None = None,
        backoff_seconds: float = RATE_LIMIT_BACKOFF_SECONDS,
        batch_delay_seconds: float = BATCH_DELAY_SECONDS,
    ):
        self.client = client
        self.api_key = settings.COINGECKO_API_KEY if api_key is None else api_key
        self.backoff_seconds = backoff_seconds
        self.batch_delay_seconds = batch_delay_seconds

    async def get_prices(self, chain_id: int, addresses: list[str]) -> dict:
        """
        Return ``{prices, logs, found, requested}`` for the given addresses.

        ``prices`` maps lowercased contract address to its USD price.
        Addresses CoinGecko doesn't know are simply absent.
        """
        platform_id = COINGECKO_PLATFORM_IDS.get(chain_id)
        if platform_id is None:
            raise ProxyError(400, f"Unsupported chain: {chain_id}")

        if not self.api_key:
            raise ProxyError(500, "CoinGecko API key not configured")

        url = COINGECKO_TOKEN_PRICE_URL.format(platform_id=platform_id)
        prices: dict[str, float] = {}
        logs: list[str] = []
        total_batches = -(-len(addresses) // BATCH_SIZE)

        for start in range(0, len(addresses), BATCH_SIZE):
            batch = addresses[start:start + BATCH_SIZE]
            label = f"Batch {start // BATCH_SIZE + 1}/{total_batches}"

            pause = True
            try:
                pause = await self._price_batch(url, batch, prices, logs, label)
            except (httpx.HTTPError, ValueError) as exc:
                logs.append(f"{label}: Error - {exc}")

            if pause and start + BATCH_SIZE < len(addresses):
                await self._sleep(self.batch_delay_seconds)

        logs.append(
            f"=== CoinGecko total: {len(prices)}/{len(addresses)} prices found ==="
        )
        logger.info("CoinGecko priced %d/%d tokens on %s",
                    len(prices), len(addresses), platform_id)

        return {
            "prices": prices,
            "logs": logs,
            "found": len(prices),
            "requested": len(addresses),
        }

    async def _price_batch(
        self,
        url: str,
        batch: list[str],
        prices: dict[str, float],
        logs: list[str],
        label: str,
    ) -> bool:
        """
        Price one batch into ``prices``.

        Returns False when the batch was rate limited or rejected; those
        move straight on to the next batch without the inter-batch pause.
        """
        params = {
            "contract_addresses": ",".join(a.lower() for a in batch),
            "vs_currencies": "usd",
        }
        headers = {"x-cg-pro-api-key": self.api_key}

        resp = await self.client.get(url, params=params, headers=headers)

        if resp.status_code == 429:
            logs.append(f"{label}: Rate limited, waiting...")
            await self._sleep(self.backoff_seconds)
            retry = await self.client.get(url, params=params, headers=headers)
            if retry.is_success:
                data = retry.json()
                _collect_prices(data, prices)
                logs.append(f"{label}: Retry succeeded, found {len(data)} prices")
            else:
                logs.append(f"{label}: Retry failed with {retry.status_code}")
            return False

        if not resp.is_success:
            logs.append(f"{label}: Failed with status {resp.status_code}")
            return False

        found = _collect_prices(resp.json(), prices)
        logs.append(f"{label}: Found {found}/{len(batch)} prices")
        return True

    async def _sleep(self, seconds: float) -> None:
        await asyncio.sleep(seconds)


def _collect_prices(data, prices: dict[str, float]) -> int:
    """Copy truthy ``usd`` entries into ``prices``; return how many were added."""
    if not isinstance(data, dict):
        return 0
    found = 0
    for address, price_data in data.items():
        usd = price_data.get("usd") if isinstance(price_data, dict) else None
        if usd:
            prices[address.lower()] = usd
            found += 1
    return found
