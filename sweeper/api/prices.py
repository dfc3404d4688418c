"""
Batch token price endpoint backed by CoinGecko.
"""

import httpx
from fastapi import APIRouter, Depends

from sweeper.api.deps import get_http_client
from sweeper.core.errors import ProxyError
from sweeper.schemas.common import ErrorResponse
from sweeper.schemas.wallet import PriceRequest, PriceResponse
from sweeper.services.price_service import PriceService

router = APIRouter()


@router.post(
    "/prices",
    response_model=PriceResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def get_prices(
    body: PriceRequest,
    client: httpx.AsyncClient = Depends(get_http_client),
):
    """
    Look up USD prices for a list of token contracts on one chain.

    Addresses are priced in batches of 50; batches that fail are skipped
    and reported in ``logs`` rather than failing the whole request.
    """
    if not body.chainId or body.addresses is None:
        raise ProxyError(400, "Missing chainId or addresses array")

    svc = PriceService(client)
    result = await svc.get_prices(body.chainId, body.addresses)
    return PriceResponse(**result)
