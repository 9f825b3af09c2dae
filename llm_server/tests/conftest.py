# tests/conftest.py
# -*- coding: utf-8 -*-
"""Shared fixtures: fake inference engine, memory-backed registry, HTTP client."""

from __future__ import annotations

import itertools
from typing import Any, Dict, List, Optional

import pytest
from fastapi.testclient import TestClient

from app.core.config import Settings
from app.main import create_app
from app.runtime_state import MemoryStorageBackend, SessionRegistry


class FakeEngine:
    """
    Records every message list it receives.

    Replies with {"response": "reply-<n>"} unless `responses` or `error`
    are set.
    """

    def __init__(self) -> None:
        self.calls: List[List[Dict[str, str]]] = []
        self.responses: List[Any] = []
        self.error: Optional[Exception] = None

    async def run(self, messages: List[Dict[str, str]]) -> Any:
        self.calls.append(messages)
        if self.error is not None:
            raise self.error
        if self.responses:
            return self.responses.pop(0)
        return {"response": f"reply-{len(self.calls)}"}


class StepClock:
    """Deterministic millisecond clock: 1000, 1001, 1002, ..."""

    def __init__(self, start: int = 1000) -> None:
        self._counter = itertools.count(start)

    def __call__(self) -> int:
        return next(self._counter)


@pytest.fixture
def engine() -> FakeEngine:
    return FakeEngine()


@pytest.fixture
def storage() -> MemoryStorageBackend:
    return MemoryStorageBackend()


@pytest.fixture
def registry(storage: MemoryStorageBackend, engine: FakeEngine) -> SessionRegistry:
    return SessionRegistry(storage=storage, engine=engine, clock=StepClock())


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        environment="test",
        debug=False,
        storage_backend="memory",
        sessions_dir=tmp_path / "sessions",
    )


@pytest.fixture
def client(test_settings: Settings, registry: SessionRegistry) -> TestClient:
    app = create_app(settings=test_settings, registry=registry)
    with TestClient(app, raise_server_exceptions=False) as c:
        yield c
