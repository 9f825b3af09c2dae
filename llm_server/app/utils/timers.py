# app/utils/timers.py
# -*- coding: utf-8 -*-
"""
Simple Chat Box Server — timing utilities
-----------------------------------------
Stopwatch context manager, used to log how long each inference call takes.
"""

from __future__ import annotations

import logging
import time
from contextlib import ContextDecorator
from typing import Optional


class Stopwatch(ContextDecorator):
    """
    Log the wall-clock duration of a block.

    Example:
        with Stopwatch("[session=demo] inference", logger):
            raw = await engine.run(messages)

    logs:
        [session=demo] inference took 0.837 s

    The duration is logged even when the block raises.
    """

    def __init__(
        self,
        label: str,
        logger: Optional[logging.Logger] = None,
        level: int = logging.INFO,
    ) -> None:
        self.label = label
        self.logger = logger or logging.getLogger(__name__)
        self.level = level
        self._start: float = 0.0
        self.elapsed: float = 0.0

    def __enter__(self) -> "Stopwatch":
        self._start = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc, exc_tb) -> None:  # type: ignore[override]
        self.elapsed = time.perf_counter() - self._start
        if exc_type is not None:
            self.logger.log(
                self.level, "%s failed after %.3f s", self.label, self.elapsed
            )
        else:
            self.logger.log(self.level, "%s took %.3f s", self.label, self.elapsed)
