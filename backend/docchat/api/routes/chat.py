"""Chat endpoints - POST /chat (ask), DELETE /chat (clear documents)."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Request
from pydantic import ValidationError

from backend.docchat.api.auth import get_current_context, get_services, get_session_token
from backend.docchat.db.context import RequestContext
from backend.docchat.errors import BadRequest
from backend.docchat.models.chat import ChatReply, ChatRequest, ClearChatResponse
from backend.docchat.services import Services

router = APIRouter(prefix="/chat", tags=["chat"])
logger = logging.getLogger(__name__)


async def read_chat_request(request: Request) -> ChatRequest:
    """Parse the chat body after the session has been checked.

    Raises:
        BadRequest: 400 if the body is not valid JSON or has the wrong shape
    """
    body = await request.body()
    try:
        return ChatRequest.model_validate_json(body or b"{}")
    except ValidationError as e:
        raise BadRequest("Invalid request body") from e


@router.post(
    "",
    response_model=ChatReply,
    openapi_extra={
        "requestBody": {
            "required": True,
            "content": {"application/json": {"schema": ChatRequest.model_json_schema()}},
        }
    },
)
async def chat(
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    token: Annotated[str | None, Depends(get_session_token)],
    services: Annotated[Services, Depends(get_services)],
    request: Request,
) -> ChatReply:
    """Answer a question from the caller's most recent document.

    The body is read by hand so that a caller without a session gets 401
    whatever they send. Missing document, missing file and unreadable text are
    normal replies (200), as is an inference failure (fallback phrase).

    Raises:
        Unauthenticated: 401 for a missing or invalid session
        BadRequest: 400 if the body is malformed or message is missing
    """
    chat_request = await read_chat_request(request)

    if not chat_request.message or not chat_request.message.strip():
        raise BadRequest("Message required")

    state = await services.pipeline.answer(
        token, chat_request.message.strip(), chat_request.structured
    )
    logger.debug(f"[chat] user_id={ctx.user_id} outcome={state.outcome}")
    return ChatReply(reply=state.reply or "")


@router.delete("", response_model=ClearChatResponse)
async def clear_chat(
    token: Annotated[str | None, Depends(get_session_token)],
    services: Annotated[Services, Depends(get_services)],
) -> ClearChatResponse:
    """Delete every document the caller owns (best effort).

    Always succeeds for an authenticated caller; per-file failures are logged
    and reported in the message.
    """
    report = await services.pipeline.delete_all(token)

    message = f"Deleted {report.deleted} document(s)."
    if report.partial:
        message += f" {report.failed} could not be removed and will be retried next time."
    return ClearChatResponse(success=True, message=message)
