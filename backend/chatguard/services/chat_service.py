"""
ChatGuard Backend — Chat Pipeline Service
===========================================

What:  Runs one chat request through rate limiting, validation and reply
       composition, and renders the result as an HTTP-ready outcome.
Who:   Called by the POST /chat route; one instance per application.
When:  Once per chat request.

Pipeline:
    ┌──────────────┐  reject  ┌─────────────────────┐
    │ Rate Limiter │ ───────→ │ 429 RATE_LIMIT      │
    └──────┬───────┘          └─────────────────────┘
           │ admit
    ┌──────▼───────┐          ┌─────────────────────┐
    │ Load Body    │ ───────→ │ 500 SERVER_ERROR    │  (any exception, any stage)
    └──────┬───────┘          └─────────────────────┘
    ┌──────▼───────┐  invalid ┌─────────────────────┐
    │ Validator    │ ───────→ │ 400 / 413 INPUT_*   │
    └──────┬───────┘          └─────────────────────┘
    ┌──────▼───────┐
    │ Composer     │ ───────→   200 {"reply": ...}
    └──────────────┘

Boundary contract:
    handle() never raises. Unexpected exceptions are logged with a traceback
    and surface to the client only as the generic SERVER_ERROR body.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

from chatguard.services.clock import Clock, SystemClock
from chatguard.services.composer import DEFAULT_PREVIEW_LENGTH, compose
from chatguard.services.error_mapper import ErrorKind, ErrorMapping, map_error
from chatguard.services.rate_limiter import SlidingWindowRateLimiter
from chatguard.services.validator import InputValidator, Invalid

logger = logging.getLogger(__name__)


@dataclass
class ChatOutcome:
    """Rendered pipeline result: status code, JSON body and extra response headers."""
    status_code: int
    body: Dict[str, Any]
    headers: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_error(cls, mapping: ErrorMapping, headers: Optional[Dict[str, str]] = None) -> "ChatOutcome":
        return cls(status_code=mapping.status_code, body=mapping.to_body(), headers=headers or {})


class ChatService:
    """
    Chat pipeline: limiter → validator → composer.

    Collaborators are injected so tests can supply a manual clock or a
    pre-configured limiter.
    """

    def __init__(
        self,
        rate_limiter: SlidingWindowRateLimiter,
        validator: Optional[InputValidator] = None,
        clock: Optional[Clock] = None,
        preview_length: int = DEFAULT_PREVIEW_LENGTH,
    ):
        self.rate_limiter = rate_limiter
        self.validator = validator or InputValidator()
        self.clock = clock or SystemClock()
        self.preview_length = preview_length

    def handle(self, client_key: str, load_body: Callable[[], Any]) -> ChatOutcome:
        """
        Process one chat request from `client_key`.

        `load_body` returns the parsed request body. It is only called once the
        request has been admitted, and any exception it raises is treated as
        an internal fault.
        """
        try:
            return self._run(client_key, load_body)
        except Exception as exc:
            return self.fault(exc, client_key=client_key)

    def fault(self, exc: BaseException, client_key: Optional[str] = None) -> ChatOutcome:
        """Log `exc` with full detail and return the generic SERVER_ERROR outcome."""
        context = getattr(exc, "context", None)
        logger.error(
            "Chat pipeline error for client %s: %s | Context: %s",
            client_key or "unknown",
            exc,
            context or {},
            exc_info=exc,
        )
        return ChatOutcome.from_error(map_error(ErrorKind.SERVER_ERROR))

    # ── Internals ─────────────────────────────────────────────────────────

    def _run(self, client_key: str, load_body: Callable[[], Any]) -> ChatOutcome:
        now = self.clock()

        # ── 1. Rate limit ─────────────────────────────────────────────────
        if not self.rate_limiter.admit(client_key, now):
            retry_ms = self.rate_limiter.retry_after_ms(client_key, now)
            retry_after = max(1, math.ceil(retry_ms / 1000))
            return ChatOutcome.from_error(
                map_error(ErrorKind.RATE_LIMITED),
                headers={"Retry-After": str(retry_after)},
            )

        # ── 2. Validate ───────────────────────────────────────────────────
        outcome = self.validator.validate(load_body())
        if isinstance(outcome, Invalid):
            mapping = map_error(outcome.kind, outcome.detail)
            logger.info("Rejected chat input from %s: %s", client_key, mapping.code)
            return ChatOutcome.from_error(mapping)

        # ── 3. Compose ────────────────────────────────────────────────────
        reply = compose(outcome.message, self.preview_length)
        logger.debug("Composed reply for %s (%d chars input)", client_key, len(outcome.message))
        return ChatOutcome(
            status_code=200,
            body={"reply": reply.model_dump(by_alias=True)},
        )
