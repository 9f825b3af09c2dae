# app/routers/chat.py
# -*- coding: utf-8 -*-
"""
Simple Chat Box Server — /chat and /history router
--------------------------------------------------
Thin HTTP layer in front of the session registry.

Flow:
  HTTP POST /chat  {"sessionId"?: str, "text": str}
    -> 400 "missing 'text'" if text is missing/empty (nothing stored)
    -> registry.get(sessionId or "default").chat(text)
    -> {"text": "..."} returned as-is

  HTTP GET /history?sessionId=...
    -> registry.get(sessionId or "default").history()
    -> [{"role", "content", "ts"}, ...]   ([] for a new session)

Errors raised by the conversation manager are logged and re-raised
unchanged; the client sees the framework's default 500 response.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import PlainTextResponse

from app.models.chat_request import DEFAULT_SESSION_ID, ChatRequest
from app.models.chat_response import ChatResponse, Message
from app.runtime_state import SessionRegistry

router = APIRouter(tags=["chat"])
logger = logging.getLogger(__name__)


def get_registry(request: Request) -> SessionRegistry:
    """The registry is created by app.main.create_app and kept on app.state."""
    return request.app.state.registry


@router.post(
    "/chat",
    response_model=ChatResponse,
    responses={400: {"description": "missing 'text'"}},
)
async def chat_endpoint(
    body: ChatRequest,
    registry: SessionRegistry = Depends(get_registry),
):
    """Run one chat turn for the given session and return the assistant text."""
    if not body.text:
        logger.info("[/chat] rejected request without text")
        return PlainTextResponse("missing 'text'", status_code=400)

    session_id = body.resolved_session_id()
    logger.info("[/chat] session_id=%s text_len=%d", session_id, len(body.text))
    logger.debug("[/chat] session_id=%s text=%r", session_id, body.text)

    try:
        return await registry.get(session_id).chat(body.text)
    except Exception:
        logger.exception("Unhandled exception in /chat (session_id=%s)", session_id)
        raise


@router.get("/history", response_model=List[Message])
async def history_endpoint(
    session_id: Optional[str] = Query(default=None, alias="sessionId"),
    registry: SessionRegistry = Depends(get_registry),
) -> List[Dict[str, Any]]:
    """Stored transcript for the session, oldest first."""
    sid = session_id if session_id is not None else DEFAULT_SESSION_ID
    logger.debug("[/history] session_id=%s", sid)
    return await registry.get(sid).history()
