# tests/test_conversation.py
# -*- coding: utf-8 -*-
"""ConversationManager: system prompt, truncation, persistence, failures."""

from __future__ import annotations

import asyncio

import pytest

from app.core.conversation import (
    HISTORY_KEY,
    MAX_HISTORY_MESSAGES,
    SYSTEM_PROMPT,
    ConversationManager,
    truncate_transcript,
)
from app.models.chat_response import Message
from app.runtime_state import MemoryStorageBackend

from conftest import FakeEngine, StepClock


def _manager(storage: MemoryStorageBackend, engine: FakeEngine, sid: str = "s1"):
    return ConversationManager(
        storage=storage.for_session(sid),
        engine=engine,
        clock=StepClock(),
        session_id=sid,
    )


def _stored(storage: MemoryStorageBackend, sid: str = "s1"):
    return asyncio.run(storage.for_session(sid).get(HISTORY_KEY))


def test_first_turn_inserts_system_prompt(storage, engine):
    manager = _manager(storage, engine)

    reply = asyncio.run(manager.chat("Hello"))

    assert reply.text == "reply-1"
    stored = _stored(storage)
    assert [m["role"] for m in stored] == ["system", "user", "assistant"]
    assert stored[0]["content"] == SYSTEM_PROMPT
    assert stored[1]["content"] == "Hello"
    assert stored[2]["content"] == "reply-1"
    assert all(isinstance(m["ts"], int) for m in stored)


@pytest.mark.parametrize("turns", [1, 2, 7, 20])
def test_system_message_stays_first_and_unique(storage, engine, turns):
    manager = _manager(storage, engine)

    for i in range(turns):
        asyncio.run(manager.chat(f"msg {i}"))

    stored = _stored(storage)
    assert stored[0]["role"] == "system"
    assert [m["role"] for m in stored].count("system") == 1
    assert len(stored) <= MAX_HISTORY_MESSAGES


def test_inference_payload_has_no_timestamps(storage, engine):
    manager = _manager(storage, engine)

    asyncio.run(manager.chat("one"))
    asyncio.run(manager.chat("two"))

    second_call = engine.calls[1]
    assert second_call == [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": "one"},
        {"role": "assistant", "content": "reply-1"},
        {"role": "user", "content": "two"},
    ]


def test_truncation_keeps_system_and_newest_29(storage, engine):
    system = {"role": "system", "content": "original system", "ts": 1}
    others = [
        {"role": "user" if i % 2 == 0 else "assistant", "content": f"m{i}", "ts": 10 + i}
        for i in range(30)
    ]
    asyncio.run(storage.for_session("s1").put(HISTORY_KEY, [system, *others]))
    manager = _manager(storage, engine)

    asyncio.run(manager.chat("new question"))

    stored = _stored(storage)
    assert len(stored) == 30
    assert stored[0] == system
    # 31 before + 2 new = 33; the three oldest non-system messages go.
    assert [m["content"] for m in stored[1:28]] == [f"m{i}" for i in range(3, 30)]
    assert stored[28]["content"] == "new question"
    assert stored[29]["content"] == "reply-1"
    assert "m0" not in {m["content"] for m in stored}
    assert "m2" not in {m["content"] for m in stored}


def test_missing_system_message_is_repaired(storage, engine):
    legacy = [
        {"role": "user", "content": "legacy question", "ts": 5},
        {"role": "assistant", "content": "legacy answer", "ts": 6},
    ]
    asyncio.run(storage.for_session("s1").put(HISTORY_KEY, legacy))
    manager = _manager(storage, engine)

    asyncio.run(manager.chat("hi again"))

    stored = _stored(storage)
    assert stored[0]["role"] == "system"
    assert stored[0]["content"] == SYSTEM_PROMPT
    assert stored[1] == legacy[0]
    assert stored[2] == legacy[1]


def test_history_is_empty_for_new_session(storage, engine):
    manager = _manager(storage, engine)
    assert asyncio.run(manager.history()) == []


def test_history_fetch_is_idempotent(storage, engine):
    manager = _manager(storage, engine)
    asyncio.run(manager.chat("Hello"))

    first = asyncio.run(manager.history())
    second = asyncio.run(manager.history())

    assert first == second
    assert len(first) == 3


def test_inference_failure_persists_nothing(storage, engine):
    manager = _manager(storage, engine)
    asyncio.run(manager.chat("kept"))
    before = _stored(storage)

    engine.error = RuntimeError("model down")
    with pytest.raises(RuntimeError, match="model down"):
        asyncio.run(manager.chat("lost"))

    assert _stored(storage) == before


def test_unrecognized_response_is_stored_as_json(storage, engine):
    engine.responses.append({})
    manager = _manager(storage, engine)

    reply = asyncio.run(manager.chat("Hello"))

    assert reply.text == "{}"
    assert _stored(storage)[-1]["content"] == "{}"


def test_truncate_with_limit_one_keeps_only_system():
    transcript = [Message(role="system", content="s", ts=0)] + [
        Message(role="user", content=f"u{i}", ts=i) for i in range(1, 4)
    ]

    assert [m.content for m in truncate_transcript(transcript, limit=1)] == ["s"]
    assert [m.content for m in truncate_transcript(transcript, limit=2)] == ["s", "u3"]


def test_unreadable_entries_are_dropped_and_missing_ts_filled(storage, engine):
    asyncio.run(
        storage.for_session("s1").put(
            HISTORY_KEY,
            [
                {"role": "user", "content": "no timestamp"},
                {"role": "tool", "content": "unknown role", "ts": 3},
                "not an object",
                {"role": "assistant", "content": "fine", "ts": 4},
            ],
        )
    )
    manager = _manager(storage, engine)

    history = asyncio.run(manager.history())
    assert [m["content"] for m in history] == ["no timestamp", "fine"]
    assert isinstance(history[0]["ts"], int)

    asyncio.run(manager.chat("next"))
    stored = _stored(storage)
    assert [m["content"] for m in stored] == [SYSTEM_PROMPT, "no timestamp", "fine", "next", "reply-1"]


def test_non_list_history_reads_as_empty(storage, engine):
    asyncio.run(storage.for_session("s1").put(HISTORY_KEY, {"oops": True}))
    manager = _manager(storage, engine)

    assert asyncio.run(manager.history()) == []
