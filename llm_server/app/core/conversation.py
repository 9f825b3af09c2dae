# app/core/conversation.py
# -*- coding: utf-8 -*-
"""
Simple Chat Box Server — Conversation manager
---------------------------------------------
One ConversationManager owns the transcript of ONE session:

    POST /chat    -> chat(user_text)
        load "history" -> repair system prompt -> append user turn
        -> inference call -> normalize reply -> append assistant turn
        -> truncate -> persist -> {"text": reply}

    GET /history  -> history()

Both collaborators (storage + inference engine) are injected, so the
policy below can be exercised with fakes.

The manager takes no lock. Requests for one session are serialized by
app.runtime_state.sessions.SessionRegistry before they get here.

If the inference call raises, nothing is persisted: the user's turn is
dropped together with the failed request.
"""

from __future__ import annotations

import json
import logging
import time
from typing import Any, Callable, Dict, List, Optional

from pydantic import ValidationError

from app.core.types import InferenceEngine, SessionStorage
from app.models.chat_response import ChatResponse, Message
from app.utils import Stopwatch

logger = logging.getLogger(__name__)

HISTORY_KEY = "history"

SYSTEM_PROMPT = "You are a concise, helpful assistant. Reply in the user's language."

# Hard cap on stored messages, system message included.
MAX_HISTORY_MESSAGES = 30


def now_ms() -> int:
    """Current wall-clock time in milliseconds since the epoch."""
    return int(time.time() * 1000)


# ---------------------------------------------------------------------------
# Response normalization
# ---------------------------------------------------------------------------


def _output_item_text(item: Any) -> str:
    """
    Text of one entry of an `output` array: `content` first, then `text`.

    Some models return `content` as a list of parts
    ([{"type": "output_text", "text": "..."}]); those parts are joined.
    """
    if not isinstance(item, dict):
        return ""

    for field in ("content", "text"):
        value = item.get(field)
        if isinstance(value, str) and value:
            return value
        if isinstance(value, list) and value:
            joined = "".join(
                part["text"]
                for part in value
                if isinstance(part, dict) and isinstance(part.get("text"), str)
            )
            if joined:
                return joined
    return ""


def extract_reply_text(response: Any) -> str:
    """
    Turn a raw inference response into plain text.

    Precedence:
      1. a non-empty string `response` field
      2. an `output` list: each item's content/text, concatenated in order
      3. a compact JSON dump of the whole response

    Never raises: whatever shape the model returns, the caller gets a string.
    """
    if isinstance(response, dict):
        direct = response.get("response")
        if isinstance(direct, str) and direct:
            return direct

        output = response.get("output")
        if isinstance(output, list):
            joined = "".join(_output_item_text(item) for item in output)
            if joined:
                return joined

    logger.warning("Unrecognized inference response shape; returning JSON dump.")
    return json.dumps(response, ensure_ascii=False, separators=(",", ":"), default=str)


# ---------------------------------------------------------------------------
# Transcript policy
# ---------------------------------------------------------------------------


def ensure_system_prompt(transcript: List[Message], ts: int) -> List[Message]:
    """Insert the system message at index 0 if it is missing."""
    if not transcript or transcript[0].role != "system":
        transcript.insert(0, Message(role="system", content=SYSTEM_PROMPT, ts=ts))
    return transcript


def truncate_transcript(
    transcript: List[Message],
    limit: int = MAX_HISTORY_MESSAGES,
) -> List[Message]:
    """Keep message 0 (the system prompt) plus the newest `limit - 1` messages."""
    if len(transcript) <= limit:
        return transcript
    if limit <= 1:
        return transcript[:1]
    return [transcript[0], *transcript[len(transcript) - (limit - 1):]]


class ConversationManager:
    """
    Transcript owner for a single session.

    Parameters
    ----------
    storage:
        Key/value store already scoped to this session.
    engine:
        Inference engine; receives [{"role", "content"}, ...].
    clock:
        Millisecond clock, injectable for tests.
    """

    def __init__(
        self,
        storage: SessionStorage,
        engine: InferenceEngine,
        clock: Callable[[], int] = now_ms,
        session_id: Optional[str] = None,
    ) -> None:
        self.storage = storage
        self.engine = engine
        self.clock = clock
        self.session_id = session_id

    async def _load(self) -> List[Message]:
        """
        Stored transcript, read leniently.

        Entries without `ts` get the current time; entries that still do not
        form a Message (unknown role, missing content, not an object) are
        dropped with a warning. Anything but a list reads as empty.
        """
        raw = await self.storage.get(HISTORY_KEY)
        if not raw:
            return []
        if not isinstance(raw, list):
            logger.warning(
                "[session=%s] stored history is %s, not a list; starting over",
                self.session_id,
                type(raw).__name__,
            )
            return []

        transcript: List[Message] = []
        for index, item in enumerate(raw):
            if isinstance(item, dict) and "ts" not in item:
                item = {**item, "ts": self.clock()}
            try:
                transcript.append(Message.model_validate(item))
            except ValidationError:
                logger.warning(
                    "[session=%s] dropping unreadable history entry %d: %r",
                    self.session_id,
                    index,
                    item,
                )
        return transcript

    async def history(self) -> List[Dict[str, Any]]:
        """Stored transcript as plain dicts, [] if nothing was persisted."""
        transcript = await self._load()
        return [m.model_dump() for m in transcript]

    async def chat(self, user_text: str) -> ChatResponse:
        """
        Run one chat turn. `user_text` is assumed non-empty (checked by the router).

        Raises whatever the inference engine raises; in that case the
        stored transcript is left untouched.
        """
        transcript = ensure_system_prompt(await self._load(), self.clock())
        transcript.append(Message(role="user", content=user_text, ts=self.clock()))

        messages = [m.to_chat_message() for m in transcript]
        logger.debug(
            "[session=%s] calling inference with %d messages",
            self.session_id,
            len(messages),
        )
        with Stopwatch(f"[session={self.session_id}] inference", logger):
            raw = await self.engine.run(messages)

        reply = extract_reply_text(raw)
        transcript.append(Message(role="assistant", content=reply, ts=self.clock()))

        transcript = truncate_transcript(transcript)
        await self.storage.put(HISTORY_KEY, [m.model_dump() for m in transcript])
        logger.info(
            "[session=%s] stored %d messages (reply %d chars)",
            self.session_id,
            len(transcript),
            len(reply),
        )

        return ChatResponse(text=reply)
