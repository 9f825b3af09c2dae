# app/runtime_state/storage.py
# -*- coding: utf-8 -*-
"""
Simple Chat Box — Session storage backends
------------------------------------------

Every session gets its own small key/value store. The conversation manager
only ever uses one key ("history"), but nothing here knows that.

Backends
~~~~~~~~
- MemoryStorageBackend: dict of dicts, lost on restart. Used by tests and
  by STORAGE_BACKEND=memory.
- FileStorageBackend: one JSON file per session under `root`:

      <root>/<sha256(session_id)>.json
      {"session_id": "demo", "values": {"history": [...]}}

  The hash keeps arbitrary session ids out of the filesystem namespace.
  Writes go through write_json_atomic, so a put() is all-or-nothing for
  that session's file.

Design notes
~~~~~~~~~~~~
- Single server process only (same as a JSON-file store always is).
  Concurrent requests for one session are serialized by SessionRegistry.
- Sessions are never deleted; files accumulate under `root`.
"""

from __future__ import annotations

import copy
import hashlib
from pathlib import Path
from typing import Any, Dict, Optional, Protocol, Union

from app.core.types import SessionStorage
from app.utils import get_logger, read_json_section, write_json_atomic

logger = get_logger("chatbox.runtime_state.storage")

VALUES_SECTION = "values"


class StorageBackend(Protocol):
    """Factory of per-session stores."""

    def for_session(self, session_id: str) -> SessionStorage:
        ...


# ---------------------------------------------------------------------------
# In-memory backend
# ---------------------------------------------------------------------------


class MemorySessionStorage:
    """Store for one session, backed by a dict owned by MemoryStorageBackend."""

    def __init__(self, values: Dict[str, Any]) -> None:
        self._values = values

    async def get(self, key: str) -> Optional[Any]:
        # Copies keep callers from mutating the stored value in place.
        return copy.deepcopy(self._values.get(key))

    async def put(self, key: str, value: Any) -> None:
        self._values[key] = copy.deepcopy(value)


class MemoryStorageBackend:
    def __init__(self) -> None:
        self._sessions: Dict[str, Dict[str, Any]] = {}

    def for_session(self, session_id: str) -> MemorySessionStorage:
        return MemorySessionStorage(self._sessions.setdefault(session_id, {}))

    def session_ids(self) -> list:
        return list(self._sessions)


# ---------------------------------------------------------------------------
# File backend
# ---------------------------------------------------------------------------


class FileSessionStorage:
    """
    Store for one session, persisted as a single JSON file.

    An unreadable or malformed file reads as empty (see
    read_json_section); the next put() replaces it.
    """

    def __init__(self, path: Path, session_id: str) -> None:
        self.path = path
        self.session_id = session_id

    def _read_values(self) -> Dict[str, Any]:
        return read_json_section(self.path, VALUES_SECTION)

    async def get(self, key: str) -> Optional[Any]:
        return self._read_values().get(key)

    async def put(self, key: str, value: Any) -> None:
        values = self._read_values()
        values[key] = value
        write_json_atomic(
            self.path,
            {"session_id": self.session_id, VALUES_SECTION: values},
        )


class FileStorageBackend:
    """
    Parameters
    ----------
    root:
        Directory holding one JSON file per session. Created on demand.
    """

    def __init__(self, root: Union[Path, str]) -> None:
        self.root = Path(root)

    def path_for(self, session_id: str) -> Path:
        digest = hashlib.sha256(session_id.encode("utf-8")).hexdigest()
        return self.root / f"{digest}.json"

    def for_session(self, session_id: str) -> FileSessionStorage:
        return FileSessionStorage(self.path_for(session_id), session_id)


def build_storage_backend(kind: str, root: Union[Path, str]) -> StorageBackend:
    """Backend named by settings.storage_backend ("file" or "memory")."""
    if kind == "memory":
        logger.info("[Storage] Using in-memory session storage.")
        return MemoryStorageBackend()
    if kind == "file":
        logger.info("[Storage] Using file session storage at %s", root)
        return FileStorageBackend(root)
    raise ValueError(f"Unknown storage backend: {kind!r}")
