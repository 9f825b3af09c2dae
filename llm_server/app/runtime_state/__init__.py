"""
Runtime state package for the Simple Chat Box server.

Tracks per-session conversation state so that every session id has its
own transcript and its own serialized request stream.

Typical usage (see app.main.create_app):

    from app.runtime_state import SessionRegistry, build_storage_backend

    registry = SessionRegistry(
        storage=build_storage_backend("file", settings.sessions_dir),
        engine=WorkersAIEngine.from_settings(settings),
    )
    reply = await registry.get("demo").chat("Hello!")
    history = await registry.get("demo").history()
"""

from .sessions import (
    SessionHandle,
    SessionRegistry,
)
from .storage import (
    FileSessionStorage,
    FileStorageBackend,
    MemorySessionStorage,
    MemoryStorageBackend,
    StorageBackend,
    build_storage_backend,
)

__all__ = [
    "SessionHandle",
    "SessionRegistry",
    "FileSessionStorage",
    "FileStorageBackend",
    "MemorySessionStorage",
    "MemoryStorageBackend",
    "StorageBackend",
    "build_storage_backend",
]
