# tests/test_utils.py
# -*- coding: utf-8 -*-
"""Logging setup and file helpers."""

from __future__ import annotations

import logging

from app.utils import read_json_section, read_text_or, setup_logging


def test_setup_logging_installs_one_handler():
    setup_logging(debug=False)
    setup_logging(debug=True)

    root = logging.getLogger()
    owned = [h for h in root.handlers if h.get_name() == "chatbox-console"]
    assert len(owned) == 1
    assert root.level == logging.DEBUG
    assert logging.getLogger("urllib3").level == logging.WARNING

    setup_logging(debug=False)
    assert root.level == logging.INFO


def test_read_json_section_shapes(tmp_path):
    path = tmp_path / "doc.json"
    assert read_json_section(path, "values") == {}

    path.write_text('{"values": {"k": 1}}', encoding="utf-8")
    assert read_json_section(path, "values") == {"k": 1}

    path.write_text("[1, 2]", encoding="utf-8")
    assert read_json_section(path, "values") == {}


def test_read_text_or_falls_back(tmp_path):
    page = tmp_path / "index.html"
    assert read_text_or(page, "fallback") == "fallback"

    page.write_text("<p>hi</p>", encoding="utf-8")
    assert read_text_or(page, "fallback") == "<p>hi</p>"
