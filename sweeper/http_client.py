"""
Shared outbound HTTP client.

One httpx.AsyncClient is reused for every upstream call so connections
to 0x, 1inch, Helius and the rest are pooled. Closed on app shutdown.
"""

import httpx

http_client = httpx.AsyncClient(headers={"Accept": "application/json"})


async def get_http_client() -> httpx.AsyncClient:
    """FastAPI dependency that provides the shared httpx client."""
    return http_client
