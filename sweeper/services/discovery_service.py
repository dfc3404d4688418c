"""
Token discovery — combines several indexers to list a wallet's ERC-20s.

No single provider sees every token, so all of them are queried and the
results are unioned rather than used as fallbacks:

  1. Alchemy      alchemy_getTokenBalances, paginated (needs ALCHEMY_API_KEY)
  2. 1inch        public balances endpoint
  3. Ankr         ankr_getAccountBalance multichain RPC
  4. Explorer     Etherscan-family tokentx history (catches dust others miss)
  5. Moralis      /{wallet}/erc20 (needs MORALIS_API_KEY)

A failing provider is noted in the logs and never stops the others.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

import httpx

from sweeper.config import Settings, settings as default_settings

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Provider chain maps
# ---------------------------------------------------------------------------

ALCHEMY_NETWORKS: dict[int, str] = {
    1: "eth-mainnet",
    8453: "base-mainnet",
    42161: "arb-mainnet",
    10: "opt-mainnet",
    137: "polygon-mainnet",
    534352: "scroll-mainnet",
    59144: "linea-mainnet",
}

ANKR_CHAINS: dict[int, str] = {
    1: "eth",
    56: "bsc",
    137: "polygon",
    43114: "avalanche",
    42161: "arbitrum",
    10: "optimism",
    8453: "base",
    534352: "scroll",
    59144: "linea",
}

# chain id -> (explorer API URL, Settings field holding its key)
EXPLORERS: dict[int, tuple[str, str]] = {
    1: ("https://api.etherscan.io/api", "ETHERSCAN_API_KEY"),
    56: ("https://api.bscscan.com/api", "BSCSCAN_API_KEY"),
    137: ("https://api.polygonscan.com/api", "POLYGONSCAN_API_KEY"),
    43114: ("https://api.snowtrace.io/api", "SNOWTRACE_API_KEY"),
    42161: ("https://api.arbiscan.io/api", "ARBISCAN_API_KEY"),
    10: ("https://api-optimistic.etherscan.io/api", "OPTIMISM_API_KEY"),
    8453: ("https://api.basescan.org/api", "BASESCAN_API_KEY"),
    534352: ("https://api.scrollscan.com/api", "SCROLLSCAN_API_KEY"),
    59144: ("https://api.lineascan.build/api", "LINEASCAN_API_KEY"),
}

MORALIS_CHAINS: dict[int, str] = {
    1: "eth",
    56: "bsc",
    137: "polygon",
    43114: "avalanche",
    42161: "arbitrum",
    10: "optimism",
    8453: "base",
    59144: "linea",
}

ALCHEMY_URL = "https://{network}.g.alchemy.com/v2/{api_key}"
ALCHEMY_MAX_PAGES = 10
ONEINCH_BALANCES_URL = "https://balances.1inch.io/v1.2/{chain_id}/balances/{wallet}"
ANKR_URL = "https://rpc.ankr.com/multichain"
MORALIS_URL = "https://deep-index.moralis.io/api/v2.2/{wallet}/erc20"

_ZERO_HEX = re.compile(r"^0x0+$")


def is_nonzero_balance(balance) -> bool:
    """True for a raw balance string that isn't some spelling of zero."""
    if not balance or not isinstance(balance, str):
        return False
    if balance in ("0x0", "0x", "0"):
        return False
    return _ZERO_HEX.match(balance) is None


# ---------------------------------------------------------------------------
# Result accumulator
# ---------------------------------------------------------------------------


@dataclass
class DiscoveryResult:
    """Unique lowercased token addresses in discovery order, plus a run log."""
    tokens: dict[str, None] = field(default_factory=dict)
    logs: list[str] = field(default_factory=list)

    def add_token(self, address) -> None:
        if isinstance(address, str) and address.startswith("0x") and len(address) == 42:
            self.tokens[address.lower()] = None

    @property
    def count(self) -> int:
        return len(self.tokens)

    def to_dict(self) -> dict:
        return {"tokens": list(self.tokens), "logs": self.logs, "count": self.count}


# ---------------------------------------------------------------------------
# DiscoveryService
# ---------------------------------------------------------------------------


class DiscoveryService:
    """Runs every token provider for a wallet and merges what they find."""

    def __init__(self, client: httpx.AsyncClient, settings: Settings | None = None):
        self.client = client
        self.settings = settings or default_settings

    async def discover(self, chain_id: int, wallet: str) -> DiscoveryResult:
        result = DiscoveryResult()

        steps = (
            ("Alchemy", self._from_alchemy),
            ("1inch", self._from_oneinch),
            ("Ankr", self._from_ankr),
            ("Explorer", self._from_explorer),
            ("Moralis", self._from_moralis),
        )
        for name, step in steps:
            try:
                await step(chain_id, wallet, result)
            except (httpx.HTTPError, ValueError, AttributeError, TypeError) as exc:
                # Unexpected payload shapes count as provider failures
                result.logs.append(f"{name} error: {exc}")

        result.logs.append(f"=== TOTAL: {result.count} unique tokens discovered ===")
        logger.info("Discovered %d tokens for %s on chain %s",
                    result.count, wallet, chain_id)
        return result

    # --- Providers ---

    async def _from_alchemy(self, chain_id: int, wallet: str, result: DiscoveryResult) -> None:
        api_key = self.settings.ALCHEMY_API_KEY
        network = ALCHEMY_NETWORKS.get(chain_id)
        if not api_key or network is None:
            return

        result.logs.append(f"Trying Alchemy ({network})...")
        url = ALCHEMY_URL.format(network=network, api_key=api_key)
        page_key = None
        page_count = 0
        total_found = 0

        while True:
            page_count += 1
            params: list = [wallet, "erc20"]
            if page_key:
                params.append({"pageKey": page_key})

            resp = await self.client.post(url, json={
                "jsonrpc": "2.0",
                "method": "alchemy_getTokenBalances",
                "params": params,
                "id": page_count,
            })
            if not resp.is_success:
                result.logs.append(f"Alchemy page {page_count} returned {resp.status_code}")
                break

            data = resp.json()
            if data.get("error"):
                error = data["error"]
                message = error.get("message") if isinstance(error, dict) else None
                result.logs.append(f"Alchemy error: {message or error}")
                break

            payload = data.get("result") or {}
            balances = payload.get("tokenBalances") or []
            for tb in balances:
                if is_nonzero_balance(tb.get("tokenBalance")):
                    result.add_token(tb.get("contractAddress"))
                    total_found += 1

            page_key = payload.get("pageKey")
            if not page_key or page_count >= ALCHEMY_MAX_PAGES:
                break
            result.logs.append(
                f"Alchemy page {page_count}: found {len(balances)} tokens, "
                "more pages available..."
            )

        result.logs.append(
            f"Alchemy total: {total_found} tokens with balance ({page_count} page(s))"
        )

    async def _from_oneinch(self, chain_id: int, wallet: str, result: DiscoveryResult) -> None:
        result.logs.append("Trying 1inch...")
        resp = await self.client.get(
            ONEINCH_BALANCES_URL.format(chain_id=chain_id, wallet=wallet)
        )
        if not resp.is_success:
            result.logs.append(f"1inch returned {resp.status_code}")
            return

        balances = resp.json()
        before = result.count
        for address, balance in balances.items():
            if balance and balance != "0":
                result.add_token(address)
        result.logs.append(
            f"1inch found {len(balances)} total, {result.count - before} new tokens added"
        )

    async def _from_ankr(self, chain_id: int, wallet: str, result: DiscoveryResult) -> None:
        chain = ANKR_CHAINS.get(chain_id)
        if chain is None:
            return

        result.logs.append(f"Trying Ankr ({chain})...")
        resp = await self.client.post(ANKR_URL, json={
            "jsonrpc": "2.0",
            "method": "ankr_getAccountBalance",
            "params": {
                "blockchain": [chain],
                "walletAddress": wallet,
                "onlyWhitelisted": False,
            },
            "id": 1,
        })
        if not resp.is_success:
            result.logs.append(f"Ankr returned {resp.status_code}")
            return

        data = resp.json()
        assets = (data.get("result") or {}).get("assets")
        if assets:
            before = result.count
            for asset in assets:
                if asset.get("contractAddress") and asset.get("balance") != "0":
                    result.add_token(asset["contractAddress"])
            result.logs.append(
                f"Ankr found {len(assets)} total, {result.count - before} new tokens added"
            )
        elif data.get("error"):
            error = data["error"]
            message = error.get("message") if isinstance(error, dict) else None
            result.logs.append(f"Ankr error: {message or error}")

    async def _from_explorer(self, chain_id: int, wallet: str, result: DiscoveryResult) -> None:
        explorer = EXPLORERS.get(chain_id)
        if explorer is None:
            return

        url, key_field = explorer
        result.logs.append("Trying block explorer (tx history)...")
        params = {
            "module": "account",
            "action": "tokentx",
            "address": wallet,
            "page": "1",
            "offset": "1000",
            "sort": "desc",
        }
        api_key = getattr(self.settings, key_field, "")
        if api_key:
            params["apikey"] = api_key

        resp = await self.client.get(url, params=params)
        if not resp.is_success:
            result.logs.append(f"Explorer returned {resp.status_code}")
            return

        data = resp.json()
        txs = data.get("result")
        if data.get("status") == "1" and isinstance(txs, list):
            before = result.count
            for tx in txs:
                result.add_token(tx.get("contractAddress"))
            result.logs.append(
                f"Explorer found {len(txs)} tx, {result.count - before} new tokens added"
            )
        else:
            result.logs.append(
                f"Explorer returned status {data.get('status')}: "
                f"{data.get('message') or 'no result'}"
            )

    async def _from_moralis(self, chain_id: int, wallet: str, result: DiscoveryResult) -> None:
        api_key = self.settings.MORALIS_API_KEY
        chain = MORALIS_CHAINS.get(chain_id)
        if not api_key or chain is None:
            return

        result.logs.append(f"Trying Moralis ({chain})...")
        resp = await self.client.get(
            MORALIS_URL.format(wallet=wallet),
            params={"chain": chain},
            headers={"X-API-Key": api_key},
        )
        if not resp.is_success:
            result.logs.append(f"Moralis returned {resp.status_code}")
            return

        data = resp.json()
        if isinstance(data, list):
            before = result.count
            for token in data:
                result.add_token(token.get("token_address"))
            result.logs.append(
                f"Moralis found {len(data)} total, {result.count - before} new tokens added"
            )
