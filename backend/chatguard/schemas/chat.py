"""
ChatGuard Backend — Pydantic Request/Response Schemas
=======================================================

What:  Pydantic models defining the API contract between frontend and backend.
How:   Python attributes are snake_case; JSON keys keep the camelCase names
       the frontend already consumes (keyPoints, nextActions, _meta.inputPreview)
       through field aliases. Always serialize with `by_alias=True`.

Note on ChatRequest:
    The chat route does NOT let FastAPI validate the body against ChatRequest.
    The validator must see malformed shapes (numbers, null, arrays) to report
    INPUT_INVALID_TYPE rather than FastAPI's generic 422. ChatRequest exists
    to document the endpoint in OpenAPI.
"""

from typing import Any, List

from pydantic import BaseModel, ConfigDict, Field


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class ChatRequest(BaseModel):
    message: Any = Field(
        default=None,
        description="User message (string, 1-500 characters after trimming)",
        examples=["Hello there"],
    )


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class ReplyMeta(BaseModel):
    """Traceability data echoed back with every reply."""

    model_config = ConfigDict(populate_by_name=True)

    input_preview: str = Field(
        alias="inputPreview",
        description="First 50 characters of the normalized message",
    )


class ChatReply(BaseModel):
    """
    What:  Structured assistant reply.
    Who:   Returned inside ChatResponse by POST /chat.

    Content is static placeholder text for now; only `_meta.inputPreview`
    depends on the request.
    """

    model_config = ConfigDict(populate_by_name=True)

    summary: str = Field(description="One-line summary of the user's message")
    key_points: List[str] = Field(alias="keyPoints", description="Ordered key points")
    next_actions: List[str] = Field(alias="nextActions", description="Suggested next steps")
    meta: ReplyMeta = Field(alias="_meta", description="Request traceability data")


class ChatResponse(BaseModel):
    reply: ChatReply


class ErrorDetail(BaseModel):
    code: str = Field(description="Machine-readable error code, e.g. INPUT_EMPTY")
    message: str = Field(description="Human-readable explanation")


class ErrorResponse(BaseModel):
    """
    What:  Standard error envelope for every non-2xx chat response.

    Example:
        {"error": {"code": "RATE_LIMIT", "message": "Too many requests, slow down."}}
    """

    error: ErrorDetail


class HealthResponse(BaseModel):
    status: str = Field(default="ok", description="Always 'ok' while the process serves requests")
