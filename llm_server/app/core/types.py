# app/core/types.py
# -*- coding: utf-8 -*-
"""
Simple Chat Box Server — Shared type helpers
--------------------------------------------
Small shared type definitions used across the core:

- Role             : "system" | "user" | "assistant"
- ChatMessage      : {"role", "content"} dict sent to the inference engine
- InferenceEngine  : anything that turns a message list into a raw response
- SessionStorage   : per-session key/value store (get / put)

The two protocols are the seams where the conversation manager meets the
outside world. Production code plugs in app.providers.workers_ai and
app.runtime_state.storage; tests plug in fakes.
"""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional, Protocol

Role = Literal["system", "user", "assistant"]

ChatMessage = Dict[str, str]


class InferenceEngine(Protocol):
    """Runs one model call. Returns the provider's raw response object."""

    async def run(self, messages: List[ChatMessage]) -> Any:
        ...


class SessionStorage(Protocol):
    """
    Key/value store scoped to ONE session.

    get() returns None for keys that were never written; put() fully
    overwrites the previous value.
    """

    async def get(self, key: str) -> Optional[Any]:
        ...

    async def put(self, key: str, value: Any) -> None:
        ...
