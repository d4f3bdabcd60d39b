"""
ChatGuard Backend — Security Headers Middleware
=================================================

What:  Adds hardening headers to every response.
How:   A fixed header set applied after the downstream app responds.
       Strict-Transport-Security is only sent in production, where the
       service sits behind HTTPS.
Who:   Applied to every request via Starlette middleware.
"""

from typing import Dict

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

CONTENT_SECURITY_POLICY = (
    "default-src 'self';base-uri 'self';font-src 'self' https: data:;"
    "form-action 'self';frame-ancestors 'self';img-src 'self' data:;"
    "object-src 'none';script-src 'self';script-src-attr 'none';"
    "style-src 'self' https: 'unsafe-inline';upgrade-insecure-requests"
)


def security_headers(*, include_hsts: bool) -> Dict[str, str]:
    """Return the header set applied to API responses."""
    headers: Dict[str, str] = {
        "Content-Security-Policy": CONTENT_SECURITY_POLICY,
        "Cross-Origin-Opener-Policy": "same-origin",
        "Cross-Origin-Resource-Policy": "same-origin",
        "Origin-Agent-Cluster": "?1",
        "Referrer-Policy": "no-referrer",
        "X-Content-Type-Options": "nosniff",
        "X-DNS-Prefetch-Control": "off",
        "X-Download-Options": "noopen",
        "X-Frame-Options": "SAMEORIGIN",
        "X-Permitted-Cross-Domain-Policies": "none",
        "X-XSS-Protection": "0",
    }
    if include_hsts:
        headers["Strict-Transport-Security"] = "max-age=15552000; includeSubDomains"
    return headers


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Sets the security header set on every response, overriding handler values."""

    def __init__(self, app: ASGIApp, include_hsts: bool = False):
        super().__init__(app)
        self._headers = security_headers(include_hsts=include_hsts)

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        response = await call_next(request)
        for key, value in self._headers.items():
            response.headers[key] = value
        return response
