"""
ChatGuard Backend — Custom Exception Hierarchy
================================================

What:  Application-specific exceptions for the few genuinely exceptional paths.
How:   Each exception class carries a message and optional context dict.
       Context is logged server-side and never returned to the client.
Who:   Raised by the request body reader and the startup checks.

Exception Hierarchy:
    ChatGuardError (base)
    ├── RequestBodyError    → 500 SERVER_ERROR (body could not be read or parsed)
    └── ConfigurationError  → startup failure (invalid production settings)

Not in this hierarchy:
    Input validation failures and rate-limit rejections are ordinary
    outcomes of the chat pipeline (see services/validator.py and
    services/rate_limiter.py). They are returned as values, not raised.
"""

from typing import Any, Dict, Optional


class ChatGuardError(Exception):
    """
    Base exception for all ChatGuard application errors.

    Attributes:
        message:  Description of the failure (for logs; clients get a generic message)
        context:  Additional debug info (logged but NOT returned to client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class RequestBodyError(ChatGuardError):
    """
    Raised when the HTTP request body cannot be turned into a JSON value.

    When:    Body exceeds max_body_bytes, is not valid UTF-8, or is malformed JSON.
    HTTP:    500 SERVER_ERROR with the generic message; detail goes to the log.
    """

    def __init__(
        self,
        message: str = "Request body could not be parsed",
        size: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if size is not None:
            ctx["size"] = size
        super().__init__(message=message, context=ctx)
        self.size = size


class ConfigurationError(ChatGuardError):
    """Raised at startup when settings are unusable for the current environment."""

    def __init__(
        self,
        message: str = "Invalid configuration",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
