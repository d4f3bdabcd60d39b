"""
ChatGuard Backend — Request Logging Middleware
================================================

What:  One access-log line per HTTP request.
How:   Measures the time spent in the downstream app and logs request ID,
       method, path, status, response size and duration.
Who:   Applied to every request via Starlette middleware.
When:  Inside RequestIDMiddleware, so the request ID is already set.

Log Format:
    <request_id> <METHOD> <path> <status> <content-length> - <duration> ms

    Example:
    3f0c...e1 POST /chat 429 79 - 0.8 ms

What we log vs what we DON'T log (privacy):
    ✅ Log: request ID, method, path, status, size, duration, client key
    ❌ Don't log: request body (chat messages may contain PII), auth headers
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from chatguard.middleware.request_id import request_id_var
from chatguard.services.client_key import client_key_from_request

logger = logging.getLogger("chatguard.access")


def level_for_status(status: int) -> int:
    """5xx → ERROR, 4xx → WARNING, everything else → INFO."""
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs structured information about each HTTP request and response.

    Duration covers everything downstream: security headers, CORS, routing,
    the chat pipeline and serialization.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        start_time = time.perf_counter()
        method = request.method
        path = request.url.path
        rid = request_id_var.get("")
        client = client_key_from_request(request)

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000
        status = response.status_code
        content_length = response.headers.get("content-length", "-")

        logger.log(
            level_for_status(status),
            "%s %s %s %d %s - %.1f ms",
            rid,
            method,
            path,
            status,
            content_length,
            duration_ms,
            extra={
                "request_id": rid,
                "method": method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client,
            },
        )

        return response
