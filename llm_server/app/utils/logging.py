# app/utils/logging.py
# -*- coding: utf-8 -*-
"""
Simple Chat Box Server — logging utilities
------------------------------------------
One console handler on the root logger, installed by setup_logging() and
owned by this module. Calling it again (app factory in tests, uvicorn
reload) swaps the level instead of stacking handlers.

Chat turns log per-session lines like:

    2026-10-19 12:00:01 [INFO] app.core.conversation: [session=demo] inference took 0.812 s
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# HTTP client / server chatter that drowns the per-session lines at DEBUG.
NOISY_LOGGERS = ("uvicorn.access", "httpx", "urllib3")

_HANDLER_NAME = "chatbox-console"


def _own_handler(root: logging.Logger) -> Optional[logging.Handler]:
    for handler in root.handlers:
        if handler.get_name() == _HANDLER_NAME:
            return handler
    return None


def setup_logging(
    *,
    debug: bool = False,
    level: Optional[int] = None,
    quiet: Iterable[str] = NOISY_LOGGERS,
    quiet_level: int = logging.WARNING,
) -> None:
    """
    Configure process logging.

    Parameters
    ----------
    debug:
        DEBUG instead of INFO (wired from settings.debug). Ignored when
        `level` is given.
    quiet:
        Logger names held at `quiet_level` regardless of `debug`.
    """
    base_level = level if level is not None else (logging.DEBUG if debug else logging.INFO)

    root = logging.getLogger()
    handler = _own_handler(root)
    if handler is None:
        handler = logging.StreamHandler()
        handler.set_name(_HANDLER_NAME)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
        root.addHandler(handler)

    root.setLevel(base_level)
    handler.setLevel(base_level)

    for name in quiet:
        logging.getLogger(name).setLevel(quiet_level)


def get_logger(name: str) -> logging.Logger:
    """
    Small convenience wrapper around logging.getLogger.

    Usage:
        from app.utils import get_logger
        logger = get_logger(__name__)
    """
    return logging.getLogger(name)
