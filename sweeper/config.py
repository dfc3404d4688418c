"""
Application settings loaded from environment variables.

Uses pydantic-settings for type-safe configuration with .env file support.
Settings are read once at import; request handlers receive derived,
immutable config values through FastAPI dependencies.
"""

from dataclasses import dataclass

from pydantic_settings import BaseSettings

TREASURY_ADDRESS = "0xe6e7d3c6379ad80de02f26ccc72605d0f70d5201"


class Settings(BaseSettings):
    """Global application settings."""

    # App
    APP_NAME: str = "Token Sweeper"
    APP_ENV: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # 0x swap aggregator
    ZERO_EX_API_KEY: str = ""
    ZERO_EX_QUOTE_URL: str = "https://api.0x.org/swap/allowance-holder/quote"
    ZERO_EX_API_VERSION: str = "v2"

    # Swap fee policy: 5 bps = 0.05%
    SWAP_FEE_BPS: str = "5"
    SWAP_FEE_RECIPIENT: str = TREASURY_ADDRESS

    # Helius (Solana)
    HELIUS_API_KEY: str = ""
    HELIUS_BASE_URL: str = "https://api.helius.xyz/v0"
    HELIUS_RPC_URL: str = "https://mainnet.helius-rpc.com/"

    # CoinGecko
    COINGECKO_API_KEY: str = ""

    # Token discovery providers
    ALCHEMY_API_KEY: str = ""
    MORALIS_API_KEY: str = ""
    ETHERSCAN_API_KEY: str = ""
    BSCSCAN_API_KEY: str = ""
    POLYGONSCAN_API_KEY: str = ""
    SNOWTRACE_API_KEY: str = ""
    ARBISCAN_API_KEY: str = ""
    OPTIMISM_API_KEY: str = ""
    BASESCAN_API_KEY: str = ""
    SCROLLSCAN_API_KEY: str = ""
    LINEASCAN_API_KEY: str = ""

    # Redis (balance cache). Empty URL disables caching.
    REDIS_URL: str = ""
    REDIS_SSL: bool = False
    BALANCE_CACHE_TTL_SECONDS: int = 30

    # CORS
    CORS_ORIGINS: list[str] = ["http://localhost:3000"]

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()


# Default slippage when the caller doesn't send one: 30 bps = 0.3%
DEFAULT_SLIPPAGE_BPS = 30


@dataclass(frozen=True)
class FeePolicy:
    """Swap fee and slippage defaults applied to every outgoing quote."""
    fee_bps: int = 5
    fee_recipient: str = ""
    default_slippage_bps: int = DEFAULT_SLIPPAGE_BPS

    @property
    def active(self) -> bool:
        return self.fee_bps != 0 and bool(self.fee_recipient)


@dataclass(frozen=True)
class QuoteConfig:
    """Immutable configuration for the 0x quote proxy."""
    api_key: str | None
    fee_policy: FeePolicy
    quote_url: str = "https://api.0x.org/swap/allowance-holder/quote"
    api_version: str = "v2"

    @classmethod
    def from_settings(cls, s: Settings) -> "QuoteConfig":
        # Empty env values fall back to the defaults
        fee_bps = s.SWAP_FEE_BPS.strip() or "5"
        recipient = s.SWAP_FEE_RECIPIENT.strip() or TREASURY_ADDRESS
        return cls(
            api_key=s.ZERO_EX_API_KEY or None,
            fee_policy=FeePolicy(
                fee_bps=int(fee_bps),
                fee_recipient=recipient,
                default_slippage_bps=DEFAULT_SLIPPAGE_BPS,
            ),
            quote_url=s.ZERO_EX_QUOTE_URL,
            api_version=s.ZERO_EX_API_VERSION,
        )


quote_config = QuoteConfig.from_settings(settings)
