"""
Token discovery endpoint. Unions results from every configured indexer.
"""

import httpx
from fastapi import APIRouter, Depends, Query

from sweeper.api.deps import get_http_client
from sweeper.core.errors import ProxyError
from sweeper.schemas.common import ErrorResponse
from sweeper.schemas.wallet import TokenDiscoveryResponse
from sweeper.services.discovery_service import DiscoveryService

router = APIRouter()


@router.get(
    "/discover",
    response_model=TokenDiscoveryResponse,
    responses={400: {"model": ErrorResponse}},
)
async def discover_tokens(
    chainId: str | None = Query(None, examples=["1"]),
    wallet: str | None = Query(None),
    client: httpx.AsyncClient = Depends(get_http_client),
):
    """
    Find every ERC-20 a wallet holds (or has touched) on one chain.

    Alchemy, 1inch, Ankr, the chain's block explorer and Moralis are all
    queried; ``logs`` records what each provider contributed.
    """
    if not chainId or not wallet:
        raise ProxyError(400, "Missing chainId or wallet parameter")
    if not chainId.isdecimal() or not chainId.isascii():
        raise ProxyError(400, f"Invalid chainId: {chainId}")

    svc = DiscoveryService(client)
    result = await svc.discover(int(chainId), wallet)
    return TokenDiscoveryResponse(**result.to_dict())
