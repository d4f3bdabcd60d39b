"""
ChatGuard Backend — Health Check Routes
=========================================

What:  Liveness endpoint for monitoring and load balancer health checks, plus a
       plain-text banner at the root path.
How:   The service has no external dependencies, so "able to answer" is
       the whole health check.
"""

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

from chatguard.schemas.chat import HealthResponse

router = APIRouter(tags=["Health"])

BANNER = "Backend is up. Try GET /health or POST /chat."


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check() -> HealthResponse:
    """Always `{"status": "ok"}` while the process is serving requests."""
    return HealthResponse(status="ok")


@router.get("/", response_class=PlainTextResponse, include_in_schema=False)
async def root() -> str:
    return BANNER
