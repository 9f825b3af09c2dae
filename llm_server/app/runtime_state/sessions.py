# app/runtime_state/sessions.py
# -*- coding: utf-8 -*-
"""
Simple Chat Box — Session registry
----------------------------------

Resolves a session identifier to its conversation manager and makes sure
requests for the SAME session never overlap.

Purpose
~~~~~~~
- One ConversationManager per session id, created on first use.
- One asyncio.Lock per session id, held for the whole of a chat turn or a
  history read, so the read-modify-write of "history" cannot interleave.
- Requests for different sessions do not share any lock and run in parallel.

Design notes
~~~~~~~~~~~~
- Single process, single event loop. Locks do not cross worker processes;
  with several uvicorn workers two requests for one session may race.
- Handles are never evicted, matching the storage (no session expiry).
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List

from app.core.conversation import ConversationManager, now_ms
from app.core.types import InferenceEngine
from app.models.chat_response import ChatResponse
from app.runtime_state.storage import StorageBackend
from app.utils import get_logger

logger = get_logger("chatbox.runtime_state.sessions")


@dataclass
class SessionHandle:
    """Serialized entry point to one session's manager."""

    session_id: str
    manager: ConversationManager
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)

    async def chat(self, text: str) -> ChatResponse:
        async with self.lock:
            return await self.manager.chat(text)

    async def history(self) -> List[Dict[str, Any]]:
        async with self.lock:
            return await self.manager.history()


class SessionRegistry:
    """
    Parameters
    ----------
    storage:
        Backend producing one store per session id.
    engine:
        Inference engine shared by all sessions (it holds no session state).
    clock:
        Millisecond clock passed on to each manager.
    """

    def __init__(
        self,
        storage: StorageBackend,
        engine: InferenceEngine,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self.storage = storage
        self.engine = engine
        self.clock = clock
        self._handles: Dict[str, SessionHandle] = {}

    def get(self, session_id: str) -> SessionHandle:
        """Return the handle for `session_id`, creating it on first reference."""
        handle = self._handles.get(session_id)
        if handle is None:
            logger.info("[SessionRegistry] Opening session %r", session_id)
            manager = ConversationManager(
                storage=self.storage.for_session(session_id),
                engine=self.engine,
                clock=self.clock,
                session_id=session_id,
            )
            handle = SessionHandle(session_id=session_id, manager=manager)
            self._handles[session_id] = handle
        return handle

    def __len__(self) -> int:
        return len(self._handles)
