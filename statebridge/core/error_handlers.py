"""
FastAPI Exception Handlers.

Maps state client exceptions to standardized HTTP error responses.

Author: StateBridge Team
Date: 2026-10-17
"""

import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from ..state.exceptions import InvalidArgumentError, StateClientError
from .logging_config import get_correlation_id
from .middleware import CORRELATION_HEADER


logger = logging.getLogger(__name__)


class ErrorDetails(BaseModel):
    """Additional error context details."""

    correlation_id: Optional[str] = Field(None, description="Request correlation identifier")
    sidecar_status: Optional[int] = Field(None, description="Status code returned by the sidecar")
    sidecar_detail: Optional[str] = Field(None, description="Body returned by the sidecar")

    model_config = ConfigDict(extra="allow")


class ErrorInfo(BaseModel):
    """Error information in API response."""

    code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    details: ErrorDetails = Field(default_factory=ErrorDetails, description="Additional context")


class ErrorResponse(BaseModel):
    """Standard API error response format."""

    error: ErrorInfo = Field(..., description="Error information")

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "error": {
                "code": "StoreMisconfigured",
                "message": "Failed to save state with status code '400': state store is not configured.",
                "details": {
                    "sidecar_status": 400,
                    "correlation_id": "abc-123"
                }
            }
        }
    })

    @classmethod
    def from_exception(cls, exc: Exception, correlation_id: Optional[str] = None) -> "ErrorResponse":
        """Create ErrorResponse from exception."""
        if isinstance(exc, StateClientError):
            error_dict = exc.to_dict()["error"]
            details_dict: Dict[str, Any] = dict(error_dict.get("details", {}))
            if correlation_id:
                details_dict["correlation_id"] = correlation_id
            return cls(
                error=ErrorInfo(
                    code=error_dict["code"],
                    message=error_dict["message"],
                    details=ErrorDetails(**details_dict)
                )
            )

        details_dict = {"correlation_id": correlation_id} if correlation_id else {}
        return cls(
            error=ErrorInfo(
                code="InternalError",
                message=str(exc) or "An unexpected error occurred",
                details=ErrorDetails(**details_dict)
            )
        )


EXCEPTION_STATUS_CODES = {
    InvalidArgumentError: status.HTTP_400_BAD_REQUEST,
}


def get_status_code_for_exception(exc: Exception) -> int:
    """
    Get HTTP status code for exception type.

    Store-side failures are not listed and surface as 500.
    """
    for exception_type, status_code in EXCEPTION_STATUS_CODES.items():
        if isinstance(exc, exception_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def state_client_exception_handler(request: Request, exc: StateClientError) -> JSONResponse:
    """Handle StateClientError exceptions."""
    correlation_id = get_correlation_id()
    status_code = get_status_code_for_exception(exc)

    logger.error(
        f"{request.method} {request.url.path} failed with {type(exc).__name__}: {exc.message}"
    )

    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse.from_exception(exc, correlation_id).model_dump(exclude_none=True)
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Handle unexpected exceptions.

    Runs after CorrelationMiddleware has unbound the correlation id, so the
    id is read back from the request state.
    """
    correlation_id = get_correlation_id() or getattr(request.state, "correlation_id", None)

    logger.error(
        f"{request.method} {request.url.path} failed unexpectedly: {exc}",
        exc_info=exc
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ErrorResponse.from_exception(exc, correlation_id).model_dump(exclude_none=True),
        headers={CORRELATION_HEADER: correlation_id} if correlation_id else None
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register exception handlers with a FastAPI app."""
    app.add_exception_handler(StateClientError, state_client_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)
