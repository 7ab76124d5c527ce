"""API route definitions."""

import logging
import time
from typing import Any, Optional

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..common.enums import ProviderName, Role
from ..core.context import AppContext
from ..core.errors import ElectionBotError, RequestValidationError
from ..core.keyword_filter import REFUSAL_MESSAGE
from ..core.session import TurnResult
from ..models import CompletionResult, Message

logger = logging.getLogger(__name__)

router = APIRouter()

VERSION = "0.1.0"


class SessionMessageRequest(BaseModel):
    """Request model for a session chat turn.

    Example:
        {"content": "When is the first phase of polling?"}
    """
    content: str


class FeedbackRequest(BaseModel):
    """Feedback on an assistant message.

    Example:
        {"message_index": 2, "positive": true}
        {"message_index": 2, "rating": 4, "category": "Response helpfulness",
         "comment": "Clear dates, thanks"}
    """
    message_index: int
    positive: Optional[bool] = None
    rating: Optional[int] = None
    category: Optional[str] = None
    comment: Optional[str] = None
    email: Optional[str] = None


class ChatMessageModel(BaseModel):
    role: str
    content: str


class SessionMessagesResponse(BaseModel):
    session_id: str
    messages: list[ChatMessageModel]


class SessionTurnResponse(SessionMessagesResponse):
    reply: ChatMessageModel
    blocked_keyword: Optional[str] = None
    error: Optional[str] = None


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    version: str
    providers: list[str]


def get_app_context(request: Request) -> AppContext:
    return request.app.state.context


def _error_response(error: ElectionBotError) -> JSONResponse:
    return JSONResponse(error.to_dict(), status_code=error.status_code)


def _parse_messages(payload: Any) -> list[Message]:
    messages = payload.get("messages") if isinstance(payload, dict) else None
    if not messages or not isinstance(messages, list):
        raise RequestValidationError("Messages array is required")

    parsed = []
    for item in messages:
        if not isinstance(item, dict) or not isinstance(item.get("content"), str) \
                or item.get("role") not in tuple(Role):
            raise RequestValidationError("Each message needs a role (user, assistant or system) and text content")
        parsed.append(Message(role=item["role"], content=item["content"]))
    return parsed


def _refusal_completion() -> CompletionResult:
    now_millis = int(time.time() * 1000)
    return CompletionResult(
        id=f"chatcmpl-{now_millis}",
        created=now_millis // 1000,
        model="keyword-filter",
        content=REFUSAL_MESSAGE,
    )


def _messages_payload(messages: list[Message]) -> list[dict[str, str]]:
    return [m.to_dict() for m in messages]


def _session_not_found(session_id: str) -> JSONResponse:
    return JSONResponse({"error": f"Session not found: {session_id}"}, status_code=404)


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request):
    """Health check endpoint."""
    context = get_app_context(request)
    return HealthResponse(
        status="healthy",
        version=VERSION,
        providers=context.orchestrator.configured_providers,
    )


@router.post("/api/chat")
async def chat(request: Request):
    """Proxy a conversation to the configured LLM providers.

    Request:
        {"messages": [{"role": "user", "content": "..."}],
         "provider": "openai" | "anthropic",   (default "openai")
         "model": "gpt-4o-mini"}               (optional)

    Returns:
        Canonical ``chat.completion`` object, whichever provider served it
    """
    context = get_app_context(request)

    try:
        try:
            payload = await request.json()
        except ValueError:
            raise RequestValidationError("Messages array is required")

        messages = _parse_messages(payload)
        provider = payload.get("provider") or ProviderName.OPENAI
        model = payload.get("model")

        latest, history = messages[-1], messages[:-1]

        if latest.role == Role.USER:
            blocked_keyword = context.keyword_filter.check(latest.content)
            if blocked_keyword:
                logger.info(f"Blocked /api/chat question: keyword='{blocked_keyword}'")
                context.analytics.track("blocked_question", keyword=blocked_keyword)
                return JSONResponse(_refusal_completion().to_dict())

        result = await context.orchestrator.complete(
            history,
            latest,
            preferred_provider=provider,
            model=model if isinstance(model, str) else None,
        )
        return JSONResponse(result.to_dict())

    except ElectionBotError as e:
        if e.status_code >= 500:
            logger.error(f"Chat request failed: {e.message}")
        return _error_response(e)
    except Exception as e:
        logger.exception("API Error")
        return JSONResponse(
            {"error": "Internal server error", "details": str(e) or type(e).__name__},
            status_code=500,
        )


@router.api_route("/api/chat", methods=["GET", "PUT", "PATCH", "DELETE"], include_in_schema=False)
async def chat_method_not_allowed():
    return JSONResponse({"error": "Method not allowed"}, status_code=405)


@router.post("/api/sessions/{session_id}", response_model=SessionMessagesResponse)
async def open_session(session_id: str, request: Request):
    """Open a session (or return an existing one) with its seeded greeting."""
    session = get_app_context(request).sessions.get_or_create(session_id)
    return SessionMessagesResponse(
        session_id=session_id,
        messages=_messages_payload(session.messages),
    )


@router.get("/api/sessions/{session_id}/messages", response_model=SessionMessagesResponse)
async def get_session_messages(session_id: str, request: Request):
    """Get a session's history."""
    session = get_app_context(request).sessions.get(session_id)
    if session is None:
        return _session_not_found(session_id)
    return SessionMessagesResponse(
        session_id=session_id,
        messages=_messages_payload(session.messages),
    )


@router.post("/api/sessions/{session_id}/messages", response_model=SessionTurnResponse)
async def post_session_message(session_id: str, body: SessionMessageRequest, request: Request):
    """Submit one user turn to a session.

    Blocked questions and upstream failures still answer 200; the reply is
    the refusal or apology message appended to the history.
    """
    session = get_app_context(request).sessions.get_or_create(session_id)

    try:
        turn: TurnResult = await session.submit(body.content)
    except ElectionBotError as e:
        return _error_response(e)

    return SessionTurnResponse(
        session_id=session_id,
        messages=_messages_payload(session.messages),
        reply=turn.reply.to_dict(),
        blocked_keyword=turn.blocked_keyword,
        error=turn.error,
    )


@router.delete("/api/sessions/{session_id}/messages", response_model=SessionMessagesResponse)
async def clear_session_messages(session_id: str, request: Request):
    """Reset a session to its greeting."""
    session = get_app_context(request).sessions.get(session_id)
    if session is None:
        return _session_not_found(session_id)

    try:
        session.clear()
    except ElectionBotError as e:
        return _error_response(e)

    return SessionMessagesResponse(
        session_id=session_id,
        messages=_messages_payload(session.messages),
    )


@router.post("/api/sessions/{session_id}/feedback")
async def post_feedback(session_id: str, body: FeedbackRequest, request: Request):
    """Record feedback on an assistant message."""
    session = get_app_context(request).sessions.get(session_id)
    if session is None:
        return _session_not_found(session_id)

    try:
        session.record_feedback(
            body.message_index,
            positive=body.positive,
            rating=body.rating,
            category=body.category,
            comment=body.comment,
            email=body.email,
        )
    except ElectionBotError as e:
        return _error_response(e)

    return {"status": "recorded"}
