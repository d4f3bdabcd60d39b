"""
ChatGuard Backend — Error Mapper
==================================

What:  Translates a pipeline failure kind into (HTTP status, code, message).
Who:   Used by ChatService to render every non-success outcome.

Mapping table:
    RATE_LIMITED  → 429 RATE_LIMIT          "Too many requests, slow down."
    INVALID_TYPE  → 400 INPUT_INVALID_TYPE  "message must be a string"
    EMPTY         → 400 INPUT_EMPTY         "Message cannot be empty"
    TOO_LONG      → 413 INPUT_TOO_LONG      "Message too long (max 500 chars)"
    SERVER_ERROR  → 500 SERVER_ERROR        "Unexpected server error"

The SERVER_ERROR message is fixed. Fault details are logged, never mapped.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


class ErrorKind(str, Enum):
    RATE_LIMITED = "rate_limited"
    INVALID_TYPE = "invalid_type"
    EMPTY = "empty"
    TOO_LONG = "too_long"
    SERVER_ERROR = "server_error"


@dataclass(frozen=True)
class ErrorMapping:
    status_code: int
    code: str
    message: str

    def to_body(self) -> Dict[str, Any]:
        """Render as the `{"error": {"code", "message"}}` response envelope."""
        return {"error": {"code": self.code, "message": self.message}}


ERROR_TABLE: Dict[ErrorKind, ErrorMapping] = {
    ErrorKind.RATE_LIMITED: ErrorMapping(429, "RATE_LIMIT", "Too many requests, slow down."),
    ErrorKind.INVALID_TYPE: ErrorMapping(400, "INPUT_INVALID_TYPE", "message must be a string"),
    ErrorKind.EMPTY: ErrorMapping(400, "INPUT_EMPTY", "Message cannot be empty"),
    ErrorKind.TOO_LONG: ErrorMapping(413, "INPUT_TOO_LONG", "Message too long (max 500 chars)"),
    ErrorKind.SERVER_ERROR: ErrorMapping(500, "SERVER_ERROR", "Unexpected server error"),
}


def map_error(kind: ErrorKind, detail: Optional[str] = None) -> ErrorMapping:
    """
    Look up the mapping for `kind`.

    `detail` replaces the default message for caller-input kinds, so a
    validator configured with a different length limit reports its own limit.
    It is ignored for SERVER_ERROR.
    """
    mapping = ERROR_TABLE[kind]
    if detail and kind is not ErrorKind.SERVER_ERROR:
        return ErrorMapping(mapping.status_code, mapping.code, detail)
    return mapping
