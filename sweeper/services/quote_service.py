"""
0x quote proxy — parameter rewriting, upstream call, and result classification.

Architecture:
  - build_quote_params()       pure transform: caller params + FeePolicy -> outgoing params
  - classify_quote_response()  pure mapping: upstream status + body -> QuoteOutcome
  - QuoteService               performs the single upstream GET with httpx

Every outgoing request gets:
  - priceImpactProtectionPercentage forced to 0.99 so 0x reports
    estimatedPriceImpact without blocking the quote
  - slippageBps defaulted when the caller omits it
  - swapFeeRecipient / swapFeeBps / swapFeeToken when the fee policy
    is active and the caller named a buyToken (all three or none)
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Union

import httpx

from sweeper.config import FeePolicy, QuoteConfig
from sweeper.core.errors import ProxyError

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

PRICE_IMPACT_PROTECTION_PERCENTAGE = "0.99"

MISSING_API_KEY_ERROR = "Missing API Key"
QUOTE_FAILED_ERROR = "Quote failed"
TRANSPORT_FAILURE_ERROR = "Failed to fetch quote"


# ---------------------------------------------------------------------------
# Parameter transform
# ---------------------------------------------------------------------------


def build_quote_params(
    params: Mapping[str, str],
    fee_policy: FeePolicy,
) -> dict[str, str]:
    """
    Return the outgoing 0x query parameters for a caller's quote request.

    The caller's mapping is copied, never modified. Caller values pass
    through verbatim except ``priceImpactProtectionPercentage``, which is
    always overridden. A caller-supplied ``slippageBps`` is kept as-is.
    """
    outgoing: dict[str, str] = {}
    for key, value in params.items():
        outgoing[key] = value

    outgoing["priceImpactProtectionPercentage"] = PRICE_IMPACT_PROTECTION_PERCENTAGE

    if "slippageBps" not in outgoing:
        outgoing["slippageBps"] = str(fee_policy.default_slippage_bps)

    # swapFeeToken must be the actual token address, not the string "buyToken"
    buy_token = params.get("buyToken")
    if fee_policy.active and buy_token:
        outgoing["swapFeeRecipient"] = fee_policy.fee_recipient
        outgoing["swapFeeBps"] = str(fee_policy.fee_bps)
        outgoing["swapFeeToken"] = buy_token

    return outgoing


# ---------------------------------------------------------------------------
# Outcome types
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class QuoteSuccess:
    """Upstream accepted the request; ``content`` is relayed verbatim."""
    status_code: int
    content: bytes
    body: Any


@dataclass(frozen=True)
class UpstreamError:
    """Upstream rejected the request with a structured error body."""
    status_code: int
    error: str
    code: Any = None
    details: Any = None


@dataclass(frozen=True)
class TransportError:
    """Network failure or unreadable upstream body. ``cause`` is never returned."""
    cause: str


QuoteOutcome = Union[QuoteSuccess, UpstreamError, TransportError]


def classify_quote_response(status_code: int, content: bytes) -> QuoteOutcome:
    """
    Map an upstream status and raw body to a QuoteOutcome.

    Bodies that aren't JSON are transport failures whatever the status.
    Error bodies surface ``reason`` or ``message`` (first non-empty),
    ``code``, and ``validationErrors`` or ``details``.
    """
    try:
        data = json.loads(content)
    except ValueError as exc:
        return TransportError(cause=f"Invalid JSON from upstream ({status_code}): {exc}")

    if 200 <= status_code < 300:
        return QuoteSuccess(status_code=status_code, content=content, body=data)

    if not isinstance(data, dict):
        return UpstreamError(status_code=status_code, error=QUOTE_FAILED_ERROR)

    error = data.get("reason") or data.get("message") or QUOTE_FAILED_ERROR
    return UpstreamError(
        status_code=status_code,
        error=str(error),
        code=data.get("code"),
        details=data.get("validationErrors") or data.get("details"),
    )


# ---------------------------------------------------------------------------
# QuoteService
# ---------------------------------------------------------------------------


class QuoteService:
    """Forwards one transformed quote request to the 0x allowance-holder API."""

    def __init__(self, config: QuoteConfig, client: httpx.AsyncClient):
        self.config = config
        self.client = client

    def build_url(self, params: Mapping[str, str]) -> httpx.URL:
        outgoing = build_quote_params(params, self.config.fee_policy)
        return httpx.URL(self.config.quote_url, params=outgoing)

    async def fetch_quote(self, params: Mapping[str, str]) -> QuoteOutcome:
        """
        Transform ``params`` and call 0x once. No retries.

        Raises ProxyError(500) before any network call if the API key
        is not configured. All other failures come back as outcomes.
        """
        if not self.config.api_key:
            raise ProxyError(500, MISSING_API_KEY_ERROR)

        url = self.build_url(params)
        logger.info("0x API request: %s", url)

        try:
            resp = await self.client.get(
                url,
                headers={
                    "0x-api-key": self.config.api_key,
                    "0x-version": self.config.api_version,
                },
            )
        except httpx.HTTPError as exc:
            logger.error("0x fetch error: %r", exc)
            return TransportError(cause=repr(exc))

        outcome = classify_quote_response(resp.status_code, resp.content)

        if isinstance(outcome, UpstreamError):
            logger.error("0x API error: %s", resp.text)
        elif isinstance(outcome, TransportError):
            logger.error("0x fetch error: %s", outcome.cause)

        return outcome
