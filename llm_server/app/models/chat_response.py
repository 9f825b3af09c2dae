# app/models/chat_response.py
# -*- coding: utf-8 -*-
"""
Simple Chat Box Server — response / transcript models
-----------------------------------------------------
- ChatResponse : body returned by POST /chat  -> {"text": "..."}
- Message      : one stored transcript entry  -> {"role", "content", "ts"}
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from app.core.types import ChatMessage, Role


class ChatResponse(BaseModel):
    """Assistant reply for one chat turn."""

    text: str = Field(..., description="Normalized assistant text.")


class Message(BaseModel):
    """
    One turn in a session transcript.

    `ts` is milliseconds since the Unix epoch, which is what the browser
    page expects when it reads /history.
    """

    role: Role
    content: str
    ts: int

    def to_chat_message(self) -> ChatMessage:
        """Inference payload form: timestamps are never sent to the model."""
        return {"role": self.role, "content": self.content}
