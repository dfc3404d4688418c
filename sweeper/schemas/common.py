"""
Shared response schemas.
"""

from typing import Any

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Normalized error body returned by every route."""
    error: str
    code: Any = None
    details: Any = None


class HealthResponse(BaseModel):
    status: str
    service: str
    version: str
