"""
Wallet balance proxy endpoints.

  - GET  /api/1inch/balances    EVM token balances via 1inch
  - GET  /api/helius/balances   Solana token balances via Helius
  - POST /api/helius/assets     Solana DAS asset listing via Helius
"""

import httpx
from fastapi import APIRouter, Depends, Query

from sweeper.api.deps import get_http_client, get_redis
from sweeper.core.errors import ProxyError
from sweeper.schemas.common import ErrorResponse
from sweeper.schemas.wallet import HeliusAssetsRequest
from sweeper.services.balance_service import BalanceService

router = APIRouter()

_ERRORS = {400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}}


@router.get("/1inch/balances", responses=_ERRORS)
async def get_evm_balances(
    chainId: str | None = Query(None, examples=["8453"]),
    wallet: str | None = Query(None),
    client: httpx.AsyncClient = Depends(get_http_client),
):
    """Proxy the 1inch balance API (avoids browser CORS issues)."""
    if not chainId or not wallet:
        raise ProxyError(400, "Missing chainId or wallet parameter")

    svc = BalanceService(client)
    return await svc.get_evm_balances(chainId, wallet)


@router.get("/helius/balances", responses=_ERRORS)
async def get_solana_balances(
    wallet: str | None = Query(None),
    client: httpx.AsyncClient = Depends(get_http_client),
    redis=Depends(get_redis),
):
    """Proxy Helius balances, keeping the API key server-side."""
    if not wallet:
        raise ProxyError(400, "Wallet address required")

    svc = BalanceService(client, redis=redis)
    return await svc.get_solana_balances(wallet)


@router.post("/helius/assets", responses=_ERRORS)
async def get_solana_assets(
    body: HeliusAssetsRequest,
    client: httpx.AsyncClient = Depends(get_http_client),
):
    """List every asset a Solana wallet owns, fungibles and native SOL included."""
    if not body.wallet:
        raise ProxyError(400, "Wallet address required")

    svc = BalanceService(client)
    return await svc.get_solana_assets(body.wallet)
