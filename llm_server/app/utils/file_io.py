# app/utils/file_io.py
# -*- coding: utf-8 -*-
"""
Simple Chat Box Server — file_io utilities
------------------------------------------
The two kinds of files this server touches:

- per-session JSON documents (file storage backend):
      {"session_id": "...", "values": {"history": [...]}}
  read_json_section() hands back one dict-valued section of such a document,
  write_json_atomic() replaces the whole document.
- the chat page HTML, read with read_text_or().

A session document that is missing, unreadable, not JSON, or has the wrong
shape reads as an empty section; the next write replaces it.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict

logger = logging.getLogger(__name__)


def read_json_section(path: Path, section: str) -> Dict[str, Any]:
    """
    Return `document[section]` from the JSON object stored at `path`.

    Anything other than an object holding an object under `section` gives {}.
    Only a malformed file is logged; a missing one is the normal
    "never written" case.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return {}
    except OSError as exc:
        logger.warning("Unreadable JSON file %s: %s", path, exc)
        return {}

    try:
        document = json.loads(text)
    except json.JSONDecodeError as exc:
        logger.warning("Invalid JSON in %s (%s); treating as empty.", path, exc)
        return {}

    body = document.get(section) if isinstance(document, dict) else None
    if not isinstance(body, dict):
        logger.warning("No %r object in %s; treating as empty.", section, path)
        return {}
    return body


def write_json_atomic(path: Path, document: Dict[str, Any]) -> None:
    """
    Replace `path` with `document` in one rename.

    The temp file gets a unique name in the target directory, so two writers
    never share a temp path and a reader never sees half a document.
    Errors are re-raised; the temp file is removed on failure.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(
        dir=path.parent, prefix=f".{path.stem}.", suffix=".tmp"
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            json.dump(document, fh, ensure_ascii=False, separators=(",", ":"))
        os.replace(tmp_name, path)
    except BaseException:
        logger.error("Failed to write %s", path, exc_info=True)
        try:
            os.unlink(tmp_name)
        except FileNotFoundError:
            pass
        raise


def read_text_or(path: Path, fallback: str) -> str:
    """UTF-8 content of `path`, or `fallback` (logged) if it cannot be read."""
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        logger.warning("Cannot read %s (%s); using fallback.", path, exc)
        return fallback
