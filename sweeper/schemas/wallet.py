"""
Pydantic schemas for balance, price and token discovery endpoints.

Request fields are optional so missing values produce the endpoint's own
400 message instead of a generic validation error.
"""

from pydantic import BaseModel


class HeliusAssetsRequest(BaseModel):
    """Body for the Helius DAS asset listing."""
    wallet: str | None = None


class PriceRequest(BaseModel):
    """Body for a batched CoinGecko price lookup."""
    chainId: int | None = None
    addresses: list[str] | None = None


class PriceResponse(BaseModel):
    """USD prices keyed by lowercased contract address."""
    prices: dict[str, float]
    logs: list[str]
    found: int
    requested: int


class TokenDiscoveryResponse(BaseModel):
    """Unique token addresses found across all providers."""
    tokens: list[str]
    logs: list[str]
    count: int
