"""
Token Sweeper — FastAPI application entry point.

Server-side proxies for the sweeper UI: 0x swap quotes with fee
injection, wallet balances, token prices and token discovery.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from sweeper.config import settings
from sweeper.api import balances, prices, quote, tokens
from sweeper.core.errors import register_exception_handlers
from sweeper.schemas.common import HealthResponse

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    from sweeper.http_client import http_client
    from sweeper.redis_client import redis

    yield

    # Shutdown: close connections
    await http_client.aclose()
    if redis is not None:
        await redis.aclose()


app = FastAPI(
    title=settings.APP_NAME,
    description="Quote, balance and price proxies for batch token sweeping.",
    version="0.1.0",
    lifespan=lifespan,
)

# --- CORS Middleware ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# --- Routers ---
app.include_router(quote.router, prefix="/api/0x", tags=["Quotes"])
app.include_router(balances.router, prefix="/api", tags=["Balances"])
app.include_router(prices.router, prefix="/api/coingecko", tags=["Prices"])
app.include_router(tokens.router, prefix="/api/tokens", tags=["Tokens"])


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint for load balancers and monitoring."""
    return {
        "status": "healthy",
        "service": settings.APP_NAME,
        "version": "0.1.0",
    }
