"""
Access Logging Middleware

Logs every API request with its status and duration, flags slow requests
and tags responses with a request id for correlation.
"""

import time
import uuid
from typing import Callable
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from teamspace.core.config import settings
from teamspace.logging import get_logger

logger = get_logger("access")

SKIPPED_PATHS = ["/", "/health", "/docs", "/openapi.json"]


class AccessLoggingMiddleware(BaseHTTPMiddleware):
    """
    Captures:
    - Request details (method, path, client IP)
    - Response status and duration
    - Request correlation id (X-Request-ID header)
    """

    def __init__(self, app: ASGIApp, enabled: bool = True, slow_threshold: float = None):
        super().__init__(app)
        self.enabled = enabled
        self.slow_threshold = slow_threshold if slow_threshold is not None else settings.SLOW_REQUEST_THRESHOLD

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if not self.enabled or request.url.path in SKIPPED_PATHS:
            return await call_next(request)

        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        request.state.request_id = request_id

        start_time = time.perf_counter()
        response = await call_next(request)
        duration = round(time.perf_counter() - start_time, 4)

        logger.request(
            "API request",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration=duration,
            ip=self._get_client_ip(request),
            request_id=request_id,
        )
        if duration > self.slow_threshold:
            logger.slow(
                "Slow request",
                duration=duration,
                threshold=self.slow_threshold,
                path=request.url.path,
            )

        response.headers["X-Request-ID"] = request_id
        return response

    def _get_client_ip(self, request: Request) -> str:
        """X-Forwarded-For first (proxied requests), then the direct client address."""
        forwarded_for = request.headers.get("x-forwarded-for")
        if forwarded_for:
            return forwarded_for.split(",")[0].strip()

        if request.client:
            return request.client.host

        return "unknown"
