"""
State Client Exceptions.

Typed failures raised by the sidecar state client.

Author: StateBridge Team
Date: 2026-10-17
"""

from typing import Any, Dict, Optional


class StateClientError(Exception):
    """
    Base exception for all state client errors.

    Attributes:
        message: Human-readable error message
        error_code: Machine-readable error code
        status_code: HTTP status returned by the sidecar, if any
        detail: Response body text returned by the sidecar, if any
    """

    error_code: str = "StateClientError"

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        status_code: Optional[int] = None,
        detail: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.error_code
        self.status_code = status_code
        self.detail = detail

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary format for API responses."""
        details: Dict[str, Any] = {}
        if self.status_code is not None:
            details["sidecar_status"] = self.status_code
        if self.detail:
            details["sidecar_detail"] = self.detail
        return {
            "error": {
                "code": self.error_code,
                "message": self.message,
                "details": details,
            }
        }


class InvalidArgumentError(StateClientError, ValueError):
    """Raised before any network call when a key or value is missing."""

    error_code = "InvalidArgument"

    def __init__(self, argument: str, message: str = "The value cannot be null or empty."):
        super().__init__(f"{message} (Parameter '{argument}')")
        self.argument = argument


class StoreMisconfiguredError(StateClientError):
    """Sidecar answered 400: state store is missing or misconfigured."""

    error_code = "StoreMisconfigured"

    def __init__(self, operation: str, status_code: int, detail: Optional[str] = None):
        super().__init__(
            f"Failed to {operation} state with status code '{status_code}': {detail or ''}.",
            status_code=status_code,
            detail=detail,
        )


class StoreUnavailableError(StateClientError):
    """Sidecar answered 500 on a write, or could not be reached at all."""

    error_code = "StoreUnavailable"

    def __init__(self, operation: str, status_code: Optional[int] = None, reason: Optional[str] = None):
        if status_code is not None:
            message = f"Failed to {operation} state with status code '{status_code}'."
        else:
            message = f"Failed to {operation} state: {reason or 'sidecar unreachable'}."
        super().__init__(message, status_code=status_code, detail=reason)


class StoreError(StateClientError):
    """Sidecar answered 204 with a body on a read or delete."""

    error_code = "StoreError"

    def __init__(self, operation: str, status_code: int, detail: Optional[str] = None):
        super().__init__(
            f"Failed to {operation} state with status code '{status_code}': {detail or ''}.",
            status_code=status_code,
            detail=detail,
        )


class UnexpectedStatusError(StateClientError):
    """Sidecar answered a write with a non-success status not otherwise mapped."""

    error_code = "UnexpectedStatus"

    def __init__(self, operation: str, status_code: int, detail: Optional[str] = None):
        super().__init__(
            f"Unexpected status code '{status_code}' while trying to {operation} state.",
            status_code=status_code,
            detail=detail,
        )
