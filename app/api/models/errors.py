"""Error bodies returned by the API."""
from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class ErrorDetail(BaseModel):
    code: str = Field(..., description="One of ErrorCodes")
    message: str = Field(..., description="What went wrong, for humans")
    details: dict[str, Any] | None = Field(default=None, description="Offending values")


class ErrorResponse(BaseModel):
    """Every 4xx raised by the endpoints carries this under ``detail``."""

    error: ErrorDetail

    model_config = {
        "json_schema_extra": {
            "example": {
                "error": {
                    "code": "INVALID_URL",
                    "message": "Only http and https URLs are allowed",
                    "details": {"url": "ftp://example.com"},
                }
            }
        }
    }


class ErrorCodes:
    INVALID_URL = "INVALID_URL"
    INVALID_REQUEST = "INVALID_REQUEST"
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"
    JOB_NOT_FOUND = "JOB_NOT_FOUND"


def error_detail(code: str, message: str, **details: Any) -> dict:
    """Body for ``HTTPException(detail=...)`` in the standard error shape."""
    return ErrorResponse(
        error=ErrorDetail(code=code, message=message, details=details or None)
    ).model_dump()
