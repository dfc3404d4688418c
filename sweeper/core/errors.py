"""
Proxy error type and the FastAPI handlers that render it.

Every failure leaves the service as an ErrorResponse body:
``{"error": str, "code"?: any, "details"?: any}``.
"""

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from sweeper.schemas.common import ErrorResponse

logger = logging.getLogger(__name__)


class ProxyError(Exception):
    """Raised by services to return a structured error to the caller."""

    def __init__(
        self,
        status_code: int,
        error: str,
        code: Any = None,
        details: Any = None,
    ):
        super().__init__(error)
        self.status_code = status_code
        self.error = error
        self.code = code
        self.details = details

    def to_response(self) -> JSONResponse:
        return error_response(self.status_code, self.error, self.code, self.details)


def error_response(
    status_code: int,
    error: str,
    code: Any = None,
    details: Any = None,
) -> JSONResponse:
    """Build a JSON error response, omitting empty ``code``/``details``."""
    body = ErrorResponse(error=error, code=code, details=details)
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(body.model_dump(exclude_none=True)),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Attach ProxyError, validation and catch-all handlers to the app."""

    @app.exception_handler(ProxyError)
    async def proxy_error_handler(_request: Request, exc: ProxyError):
        return exc.to_response()

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(_request: Request, exc: RequestValidationError):
        return error_response(
            status.HTTP_400_BAD_REQUEST,
            "Invalid request",
            details=jsonable_encoder(exc.errors()),
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, _exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error"
        )
