"""
0x swap quote proxy endpoint.

Forwards the caller's query string to the 0x allowance-holder quote API
after injecting price-impact, slippage and fee parameters. The API key
stays server-side. Responses are either the 0x body verbatim or a
normalized ``{"error", "code", "details"}`` body.
"""

import logging

import httpx
from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import Response

from sweeper.api.deps import get_http_client, get_quote_config
from sweeper.config import QuoteConfig
from sweeper.core.errors import error_response
from sweeper.schemas.common import ErrorResponse
from sweeper.services.quote_service import (
    TRANSPORT_FAILURE_ERROR,
    QuoteOutcome,
    QuoteService,
    QuoteSuccess,
    UpstreamError,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def render_outcome(outcome: QuoteOutcome) -> Response:
    """Turn a classified upstream outcome into the outward HTTP response."""
    if isinstance(outcome, QuoteSuccess):
        return Response(
            content=outcome.content,
            status_code=outcome.status_code,
            media_type="application/json",
        )
    if isinstance(outcome, UpstreamError):
        return error_response(
            outcome.status_code, outcome.error, outcome.code, outcome.details
        )
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR, TRANSPORT_FAILURE_ERROR
    )


@router.get(
    "/quote",
    responses={"default": {"model": ErrorResponse}},
)
async def get_quote(
    request: Request,
    config: QuoteConfig = Depends(get_quote_config),
    client: httpx.AsyncClient = Depends(get_http_client),
):
    """
    Get an executable swap quote from 0x.

    All query parameters (``chainId``, ``sellToken``, ``buyToken``,
    ``sellAmount``, ``taker``, ``slippageBps``, ...) pass through to 0x.
    ``priceImpactProtectionPercentage`` is always set to 0.99, slippage
    defaults to 30 bps, and the swap fee is added when ``buyToken`` is given.
    """
    svc = QuoteService(config, client)
    outcome = await svc.fetch_quote(request.query_params)
    return render_outcome(outcome)
