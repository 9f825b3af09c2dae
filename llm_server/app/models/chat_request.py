# app/models/chat_request.py
# -*- coding: utf-8 -*-
"""
Simple Chat Box Server — ChatRequest model
------------------------------------------
Request payload for POST /chat, as sent by the browser page:

    {"sessionId": "demo", "text": "Hello!"}

`text` is optional at the model level on purpose: the router answers a
missing or empty text with a plain 400 "missing 'text'" instead of the
422 validation error FastAPI would produce for a required field.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_SESSION_ID = "default"


class ChatRequest(BaseModel):
    """
    Request body for /chat.

    Fields
    ------
    session_id:
        Opaque conversation key (JSON: "sessionId"). Falls back to
        "default" when omitted or null.
    text:
        The user's message, forwarded to the conversation manager verbatim.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "examples": [
                {"sessionId": "demo", "text": "Hello, who are you?"},
                {"text": "Uses the default session."},
            ]
        },
    )

    session_id: Optional[str] = Field(
        default=None,
        alias="sessionId",
        description="Conversation key; defaults to 'default'.",
    )
    text: Optional[str] = Field(
        default=None,
        description="User message in plain text. Must be non-empty.",
    )

    def resolved_session_id(self) -> str:
        return self.session_id if self.session_id is not None else DEFAULT_SESSION_ID
