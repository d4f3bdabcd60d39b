"""
ChatGuard Backend — Chat Route Handler
========================================

What:  Handles POST /chat.
How:   Resolves the client key, reads the raw body and hands both to
       ChatService, then renders the returned outcome as JSON.
Who:   Called by the frontend chat box.

Request Flow:
    1. Client key from X-Forwarded-For / peer address
    2. Raw body bytes read, stopping at max_body_bytes (not yet parsed)
    3. ChatService: rate limit → parse body → validate → compose
    4. Outcome rendered with its status code and headers

The body is parsed here by hand instead of by a Pydantic body parameter:
FastAPI would answer malformed shapes with its own 422, while this endpoint
must report INPUT_INVALID_TYPE (400) and must rate limit before parsing.
"""

import json
import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from chatguard.exceptions import RequestBodyError
from chatguard.schemas.chat import ChatRequest, ChatResponse, ErrorResponse
from chatguard.services.chat_service import ChatService
from chatguard.services.client_key import client_key_from_request

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Chat"])


def get_chat_service(request: Request) -> ChatService:
    """Dependency: the application's single ChatService (created in create_app)."""
    return request.app.state.chat_service


def is_json_content_type(content_type: Optional[str]) -> bool:
    """True for application/json and any application/*+json media type."""
    if not content_type:
        return False
    media_type = content_type.split(";")[0].strip().lower()
    return media_type == "application/json" or (
        media_type.startswith("application/") and media_type.endswith("+json")
    )


async def read_body_limited(request: Request, max_bytes: int) -> bytes:
    """
    Read the request body, stopping as soon as it exceeds `max_bytes`.

    A declared Content-Length over the limit is rejected before anything is
    read; chunked bodies are counted while they stream in.

    Raises:
        RequestBodyError: Declared or streamed size over the limit.
    """
    declared = request.headers.get("content-length")
    if declared is not None:
        try:
            declared_size = int(declared)
        except ValueError:
            raise RequestBodyError(message=f"Invalid Content-Length header: {declared!r}") from None
        if declared_size > max_bytes:
            raise RequestBodyError(
                message=f"Request body exceeds {max_bytes} bytes",
                size=declared_size,
            )

    chunks = []
    total = 0
    async for chunk in request.stream():
        total += len(chunk)
        if total > max_bytes:
            raise RequestBodyError(
                message=f"Request body exceeds {max_bytes} bytes",
                size=total,
            )
        chunks.append(chunk)
    return b"".join(chunks)


def parse_json_body(raw: bytes, content_type: Optional[str], max_bytes: int) -> Any:
    """
    Turn the raw request body into a JSON value.

    Non-JSON content types and empty bodies yield {} (no `message` field).

    Raises:
        RequestBodyError: Body too large, not UTF-8, or malformed JSON.
    """
    if len(raw) > max_bytes:
        raise RequestBodyError(
            message=f"Request body exceeds {max_bytes} bytes",
            size=len(raw),
        )
    if not is_json_content_type(content_type) or not raw.strip():
        return {}
    try:
        return json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as e:
        raise RequestBodyError(
            message=f"Malformed JSON body: {e}",
            size=len(raw),
        ) from e


@router.post(
    "/chat",
    response_model=ChatResponse,
    responses={
        200: {"description": "Structured reply", "model": ChatResponse},
        400: {"description": "INPUT_INVALID_TYPE or INPUT_EMPTY", "model": ErrorResponse},
        413: {"description": "INPUT_TOO_LONG", "model": ErrorResponse},
        429: {"description": "RATE_LIMIT", "model": ErrorResponse},
        500: {"description": "SERVER_ERROR", "model": ErrorResponse},
    },
    openapi_extra={
        "requestBody": {
            "content": {"application/json": {"schema": ChatRequest.model_json_schema()}},
        },
    },
    summary="Send a chat message",
)
async def chat(
    request: Request,
    service: ChatService = Depends(get_chat_service),
) -> JSONResponse:
    """
    Validate a chat message and return the structured reply.

    Every outcome, including internal faults, is rendered here; nothing
    propagates to the global exception handlers.
    """
    client_key = client_key_from_request(request)
    content_type = request.headers.get("content-type")
    max_bytes = request.app.state.settings.max_body_bytes

    raw = b""
    read_error: Optional[Exception] = None
    try:
        raw = await read_body_limited(request, max_bytes)
    except Exception as exc:
        logger.debug("Body read failed for client %s: %s", client_key, exc)
        read_error = exc

    def load_body() -> Any:
        # Read failures surface only once the request has been admitted
        if read_error is not None:
            raise read_error
        return parse_json_body(raw, content_type, max_bytes)

    outcome = service.handle(client_key, load_body)

    return JSONResponse(
        status_code=outcome.status_code,
        content=outcome.body,
        headers=outcome.headers or None,
    )
