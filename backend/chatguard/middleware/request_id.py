"""
ChatGuard Backend — Request ID Middleware
===========================================

What:  Assigns a unique ID to each incoming request and adds it to the response.
How:   Reuses a safe client-supplied X-Request-ID or creates a UUID, stores it
       in a ContextVar and request.state, and returns it in the response header.
Who:   Applied to every request via Starlette middleware.
When:  Outermost middleware (runs before all other processing).

Every log line written while handling a request can be correlated through
this ID, and clients can quote it when reporting problems.
"""

import re
import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# Coroutine-local storage for the current request ID
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

# Incoming IDs are reused only if they look like hex/uuid, max 64 chars
_SAFE_REQUEST_ID_PATTERN = re.compile(r"[a-fA-F0-9\-]{1,64}")


def resolve_request_id(incoming: str) -> str:
    """Return `incoming` if it is a safe ID, otherwise a fresh uuid4."""
    candidate = (incoming or "").strip()
    if candidate and _SAFE_REQUEST_ID_PATTERN.fullmatch(candidate):
        return candidate
    return str(uuid.uuid4())


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Middleware that assigns a unique ID to each request for tracing.

    Behavior:
        1. Check if client sent X-Request-ID header (e.g., from frontend)
        2. If present and safe: use it (end-to-end tracing from the frontend)
        3. Otherwise: generate a new UUID
        4. Store in ContextVar for use by loggers throughout the request
        5. Add to response headers for client to capture

    Unsafe values (spaces, newlines, overly long strings) are never reused,
    which keeps attacker-controlled text out of log lines.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = resolve_request_id(request.headers.get("X-Request-ID", ""))

        token = request_id_var.set(rid)
        request.state.request_id = rid

        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)

        response.headers["X-Request-ID"] = rid
        return response
