# tests/test_extract_reply.py
# -*- coding: utf-8 -*-
"""extract_reply_text precedence: response -> output[] -> JSON dump."""

from __future__ import annotations

from app.core.conversation import extract_reply_text


def test_direct_response_field():
    assert extract_reply_text({"response": "hello"}) == "hello"


def test_output_items_are_concatenated_in_order():
    resp = {"output": [{"text": "a"}, {"content": "b"}]}
    assert extract_reply_text(resp) == "ab"


def test_content_wins_over_text_within_an_item():
    resp = {"output": [{"content": "x", "text": "ignored"}, {"text": "y"}]}
    assert extract_reply_text(resp) == "xy"


def test_content_parts_are_joined():
    resp = {
        "output": [
            {"type": "reasoning", "content": []},
            {
                "type": "message",
                "content": [
                    {"type": "output_text", "text": "Hel"},
                    {"type": "output_text", "text": "lo"},
                ],
            },
        ]
    }
    assert extract_reply_text(resp) == "Hello"


def test_empty_object_falls_back_to_json():
    assert extract_reply_text({}) == "{}"


def test_empty_response_and_empty_output_fall_back_to_json():
    resp = {"response": "", "output": [{"text": ""}]}
    assert extract_reply_text(resp) == '{"response":"","output":[{"text":""}]}'


def test_response_field_beats_output():
    resp = {"response": "direct", "output": [{"text": "ignored"}]}
    assert extract_reply_text(resp) == "direct"


def test_non_dict_response_is_dumped():
    assert extract_reply_text(None) == "null"
    assert extract_reply_text(["a"]) == '["a"]'
