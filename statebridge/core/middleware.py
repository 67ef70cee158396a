"""
Correlation ID Middleware.

Extracts or generates correlation IDs and propagates them through requests.
"""

import logging
import time
import uuid

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from .logging_config import clear_correlation_id, log_with_context, set_correlation_id


logger = logging.getLogger(__name__)

CORRELATION_HEADER = "x-correlation-id"


class CorrelationMiddleware(BaseHTTPMiddleware):
    """Middleware to handle correlation ID extraction and propagation."""

    async def dispatch(self, request: Request, call_next):
        """Process request and inject correlation ID."""
        correlation_id = request.headers.get(CORRELATION_HEADER) or request.headers.get('correlation-id')
        if not correlation_id:
            correlation_id = str(uuid.uuid4())

        set_correlation_id(correlation_id)
        # Exception handlers for bare Exception run outside this middleware
        request.state.correlation_id = correlation_id

        start_time = time.time()
        log_with_context(
            logger, logging.DEBUG,
            f"Request started: {request.method} {request.url.path}",
            method=request.method,
            path=request.url.path,
        )

        try:
            response: Response = await call_next(request)
            response.headers[CORRELATION_HEADER] = correlation_id

            duration_ms = (time.time() - start_time) * 1000
            log_with_context(
                logger, logging.INFO,
                f"Request completed: {request.method} {request.url.path} - {response.status_code}",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                duration_ms=round(duration_ms, 2),
            )
            return response
        finally:
            clear_correlation_id()
