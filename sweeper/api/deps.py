"""
Reusable FastAPI dependencies.

Dependencies:
  - get_quote_config  — immutable 0x quote configuration built at startup
  - get_http_client   — shared outbound httpx client (re-exported)
  - get_redis         — optional balance cache (re-exported)

Tests override these through ``app.dependency_overrides`` instead of
mutating environment variables.
"""

from sweeper.config import QuoteConfig, quote_config
from sweeper.http_client import get_http_client
from sweeper.redis_client import get_redis

__all__ = ["get_quote_config", "get_http_client", "get_redis"]


async def get_quote_config() -> QuoteConfig:
    """Return the process-wide quote configuration."""
    return quote_config
