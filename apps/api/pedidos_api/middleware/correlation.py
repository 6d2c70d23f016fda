"""Correlation ID and request logging middleware."""

import logging
import time
import uuid

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

logger = logging.getLogger("pedidos_api.requests")


class CorrelationIDMiddleware(BaseHTTPMiddleware):
    """Tag each request with a correlation ID and log its outcome."""

    async def dispatch(self, request: Request, call_next):
        """Process request with correlation ID."""
        correlation_id = request.headers.get("x-correlation-id") or str(uuid.uuid4())
        request.state.correlation_id = correlation_id
        start = time.monotonic()

        try:
            response: Response = await call_next(request)
        except Exception:
            logger.exception(f"{request.method} {request.url.path} failed [{correlation_id}]")
            raise

        duration_ms = int((time.monotonic() - start) * 1000)
        logger.info(
            f"{request.method} {request.url.path} -> {response.status_code} "
            f"in {duration_ms}ms [{correlation_id}]"
        )
        response.headers["x-correlation-id"] = correlation_id
        return response
