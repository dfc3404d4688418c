"""
Manual quote check — runs one 0x quote request from the command line.

Usage:
    python scripts/get_quote.py chainId=8453 sellToken=0x... buyToken=0x... \
        sellAmount=1000000 taker=0x...

Prints the outgoing URL (fee and slippage parameters included) and the
classified 0x outcome. Useful for checking the fee policy without the UI.
"""

import asyncio
import json
import sys
from dataclasses import asdict

import httpx

from sweeper.config import quote_config
from sweeper.core.errors import ProxyError
from sweeper.services.quote_service import QuoteService, QuoteSuccess


def parse_args(argv: list[str]) -> dict[str, str]:
    """Turn ``key=value`` arguments into a parameter mapping."""
    params: dict[str, str] = {}
    for arg in argv:
        key, sep, value = arg.partition("=")
        if not sep:
            raise SystemExit(f"Expected key=value, got {arg!r}")
        params[key] = value
    return params


async def main():
    """Build, send and report a single quote request."""
    params = parse_args(sys.argv[1:])

    async with httpx.AsyncClient() as client:
        svc = QuoteService(quote_config, client)
        print(f"Outgoing URL: {svc.build_url(params)}")
        try:
            outcome = await svc.fetch_quote(params)
        except ProxyError as exc:
            raise SystemExit(f"Error: {exc.error}")

    print(f"\n=== {type(outcome).__name__} ===")
    if isinstance(outcome, QuoteSuccess):
        print(json.dumps(outcome.body, indent=2))
    else:
        print(json.dumps(asdict(outcome), indent=2, default=str))


if __name__ == "__main__":
    asyncio.run(main())
