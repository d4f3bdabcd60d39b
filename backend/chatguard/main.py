"""
ChatGuard Backend — FastAPI Application Factory
=================================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn to start the server (uvicorn chatguard.main:app)
       and by tests to get an isolated app per test.
When:  Once at server startup; the returned app handles all subsequent requests.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────┐ ┌─────────┐ ┌──────────┐ ┌────────┐   │
    │  │  Req ID  │→│ Logging │→│ Sec Hdrs │→│  CORS  │   │
    │  └──────────┘ └─────────┘ └──────────┘ └────────┘   │
    │                                                     │
    │  Routes:                                            │
    │  ┌──────────────┐ ┌──────────────┐ ┌─────────────┐  │
    │  │ POST /chat   │ │ GET /health  │ │ GET /       │  │
    │  └──────────────┘ └──────────────┘ └─────────────┘  │
    │                                                     │
    │  app.state:                                         │
    │    settings · rate_limiter · chat_service           │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Initialize logging
    2. Validate configuration (fail fast in production)
    3. Log startup complete

    Shutdown:
    1. Log how many clients the rate limiter was tracking
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from chatguard import __version__
from chatguard.config import Settings, settings as default_settings
from chatguard.exceptions import ConfigurationError
from chatguard.middleware.logging import RequestLoggingMiddleware
from chatguard.middleware.request_id import RequestIDMiddleware
from chatguard.middleware.security_headers import SecurityHeadersMiddleware, security_headers
from chatguard.routes import chat, health
from chatguard.services.chat_service import ChatService
from chatguard.services.clock import Clock
from chatguard.services.error_mapper import ErrorKind, map_error
from chatguard.services.rate_limiter import SlidingWindowRateLimiter
from chatguard.services.validator import InputValidator

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str = "INFO") -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    Output: stdout (container runtimes capture it)
    """
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Our access log replaces uvicorn's
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: logging and configuration checks. Shutdown: final log line."""
    cfg: Settings = app.state.settings

    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging(cfg.log_level)
    logger.info("=" * 60)
    logger.info("ChatGuard Backend %s starting up (%s)...", __version__, cfg.app_env)

    try:
        cfg.validate_required_for_production()
    except ValueError as e:
        logger.error("Configuration error: %s", str(e))
        raise ConfigurationError(message=str(e), context={"app_env": cfg.app_env}) from e

    if not cfg.allowed_origins_list:
        logger.warning("ALLOWED_ORIGINS is empty: accepting requests from any origin")

    logger.info(
        "Rate limit: %d requests per %dms per client",
        cfg.rate_limit_requests,
        cfg.rate_limit_window_ms,
    )
    logger.info("Server ready at http://%s:%d", cfg.host, cfg.port)
    logger.info("=" * 60)

    yield  # Application runs here

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info(
        "ChatGuard Backend shutting down (%d clients tracked by rate limiter)",
        app.state.rate_limiter.tracked_clients,
    )


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Catch-all for anything that escapes a route.

    POST /chat renders its own faults; this handler covers every other route
    with the same SERVER_ERROR envelope. Details are logged server-side only.

    Starlette answers from outside the middleware stack here, so the
    security headers are set on the response directly and no access-log
    line is written; the error log line carries the request ID instead.
    """

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = getattr(request.state, "request_id", "")
        logger.error(
            "[%s] Unexpected error: %s",
            rid,
            str(exc),
            exc_info=True,
        )
        mapping = map_error(ErrorKind.SERVER_ERROR)
        headers = security_headers(include_hsts=request.app.state.settings.is_production)
        if rid:
            headers["X-Request-ID"] = rid
        return JSONResponse(
            status_code=mapping.status_code,
            content=mapping.to_body(),
            headers=headers,
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(settings: Optional[Settings] = None, clock: Optional[Clock] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Configuration to use (defaults to the module singleton).
        clock:    Millisecond clock for the rate limiter (defaults to wall clock).

    Each call builds its own rate limiter, so separate apps never share
    request history.
    """
    cfg = settings or default_settings

    app = FastAPI(
        title="ChatGuard API",
        description=(
            "Chat backend with input validation and per-client rate limiting. "
            "Replies are structured placeholders until a model provider is integrated."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Shared State ──────────────────────────────────────────────────────
    rate_limiter = SlidingWindowRateLimiter(
        max_requests=cfg.rate_limit_requests,
        window_ms=cfg.rate_limit_window_ms,
        max_clients=cfg.rate_limit_max_clients,
        sweep_interval=cfg.rate_limit_sweep_interval,
    )
    app.state.settings = cfg
    app.state.rate_limiter = rate_limiter
    app.state.chat_service = ChatService(
        rate_limiter=rate_limiter,
        validator=InputValidator(max_length=cfg.max_message_length),
        clock=clock,
        preview_length=cfg.preview_length,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Middleware executes in REVERSE order of addition:
    # added CORS → SecurityHeaders → Logging → RequestID
    # runs  RequestID → Logging → SecurityHeaders → CORS

    origins = cfg.allowed_origins_list
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins or ["*"],
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Retry-After"],
    )

    app.add_middleware(SecurityHeadersMiddleware, include_hsts=cfg.is_production)

    app.add_middleware(RequestLoggingMiddleware)

    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(health.router)
    app.include_router(chat.router)

    return app


# ── Application Instance ─────────────────────────────────────────────────
# uvicorn expects `chatguard.main:app` to be importable
app = create_app()
