"""
ChatGuard Backend — Chat Input Validator
==========================================

What:  Validates and normalizes the `message` field of a POST /chat body.
How:   Ordered checks, first failure wins:

    1. Type      `message` must be a str       → INPUT_INVALID_TYPE
    2. Empty     trimmed string non-empty      → INPUT_EMPTY
    3. Length    trimmed length <= max_length  → INPUT_TOO_LONG
    4. Normalize collapse whitespace runs, truncate to max_length

    The type check always runs first: anything that is not a string never
    reaches the trimming steps.

Result:
    validate() returns a ValidationOutcome value (Valid or Invalid) instead of
    raising, so the pipeline handles rejected input like any other result.
"""

import re
from dataclasses import dataclass
from typing import Any, Union

from chatguard.services.error_mapper import ErrorKind

DEFAULT_MAX_LENGTH = 500

# Whitespace as browsers and JSON clients see it (ECMAScript WhiteSpace and
# LineTerminator). Unlike str.isspace(), U+001C..U+001F and U+0085 are
# excluded and the byte order mark U+FEFF is included.
WHITESPACE = "".join(
    chr(cp)
    for cp in (
        0x09, 0x0A, 0x0B, 0x0C, 0x0D, 0x20, 0xA0, 0x1680,
        *range(0x2000, 0x200B),
        0x2028, 0x2029, 0x202F, 0x205F, 0x3000, 0xFEFF,
    )
)
_WHITESPACE_RUN = re.compile("[" + re.escape(WHITESPACE) + "]+")


@dataclass(frozen=True)
class Valid:
    """Input passed every check; `message` is the normalized text."""
    message: str


@dataclass(frozen=True)
class Invalid:
    """Input failed a check; `kind` selects the HTTP mapping, `detail` is the client message."""
    kind: ErrorKind
    detail: str


ValidationOutcome = Union[Valid, Invalid]


def normalize_message(text: str, max_length: int = DEFAULT_MAX_LENGTH) -> str:
    """Trim, collapse every whitespace run to a single space, truncate to max_length."""
    return _WHITESPACE_RUN.sub(" ", text.strip(WHITESPACE))[:max_length]


class InputValidator:
    """Applies the ordered message checks with a configurable length limit."""

    def __init__(self, max_length: int = DEFAULT_MAX_LENGTH):
        self.max_length = max_length

    def validate(self, raw_body: Any) -> ValidationOutcome:
        """
        Validate a parsed request body of unknown shape.

        Non-object bodies (lists, strings, null) are treated as having no
        `message` field and fail the type check.
        """
        message = raw_body.get("message") if isinstance(raw_body, dict) else None

        # ── 1. Type ───────────────────────────────────────────────────────
        if not isinstance(message, str):
            return Invalid(ErrorKind.INVALID_TYPE, "message must be a string")

        # ── 2. Empty ──────────────────────────────────────────────────────
        trimmed = message.strip(WHITESPACE)
        if not trimmed:
            return Invalid(ErrorKind.EMPTY, "Message cannot be empty")

        # ── 3. Length ─────────────────────────────────────────────────────
        if len(trimmed) > self.max_length:
            return Invalid(
                ErrorKind.TOO_LONG,
                f"Message too long (max {self.max_length} chars)",
            )

        # ── 4. Normalize ──────────────────────────────────────────────────
        return Valid(normalize_message(trimmed, self.max_length))


def validate(raw_body: Any) -> ValidationOutcome:
    """Validate with the default 500-character limit."""
    return InputValidator().validate(raw_body)
