# app/utils/__init__.py
# -*- coding: utf-8 -*-
"""
Simple Chat Box Server — Utility toolbox
----------------------------------------
- file_io   : session JSON documents + chat page loading
- logging   : the single console handler and its levels
- timers    : Stopwatch around the inference call

    from app.utils import get_logger, read_json_section, Stopwatch
"""

from __future__ import annotations

from .file_io import (  # noqa: F401
    read_json_section,
    read_text_or,
    write_json_atomic,
)

from .logging import (  # noqa: F401
    get_logger,
    setup_logging,
)

from .timers import (  # noqa: F401
    Stopwatch,
)
