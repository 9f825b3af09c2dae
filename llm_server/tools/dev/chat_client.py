#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Simple Chat Box — Dev console client (/chat, /history)
------------------------------------------------------
Interactive console tool for talking to the chat server over HTTP.

Features:
- Prints the stored transcript of the session on start.
- Simple REPL: you type, the assistant answers.
- /history reprints the transcript, /quit exits.

Usage:

    python3 tools/dev/chat_client.py --server http://127.0.0.1:8000 --session dev-01

Failed requests are reported and NOT retried; type the message again.
"""

from __future__ import annotations

import argparse
import sys
from typing import Any, Dict, List

import requests

DEFAULT_SERVER = "http://127.0.0.1:8000"

ROLE_MARKERS = {"user": "You", "assistant": "Assistant", "system": "System"}


# ---------------------------------------------------------------------------
# CLI argument parsing
# ---------------------------------------------------------------------------


def parse_args(argv: List[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Simple Chat Box — Dev console client",
    )
    parser.add_argument(
        "--server",
        type=str,
        default=DEFAULT_SERVER,
        help=f"Server base URL (default: {DEFAULT_SERVER})",
    )
    parser.add_argument(
        "--session",
        type=str,
        default="default",
        help="sessionId to chat in (default: 'default').",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=120.0,
        help="HTTP timeout in seconds for each request (default: 120).",
    )
    return parser.parse_args(argv)


# ---------------------------------------------------------------------------
# HTTP helpers
# ---------------------------------------------------------------------------


def fetch_history(args: argparse.Namespace) -> List[Dict[str, Any]]:
    resp = requests.get(
        f"{args.server.rstrip('/')}/history",
        params={"sessionId": args.session},
        timeout=args.timeout,
    )
    resp.raise_for_status()
    return resp.json()


def send_chat(text: str, args: argparse.Namespace) -> str:
    resp = requests.post(
        f"{args.server.rstrip('/')}/chat",
        json={"sessionId": args.session, "text": text},
        timeout=args.timeout,
    )
    resp.raise_for_status()
    return resp.json()["text"]


def print_history(history: List[Dict[str, Any]]) -> None:
    if not history:
        print("(no history yet)\n")
        return
    for msg in history:
        who = ROLE_MARKERS.get(msg.get("role"), msg.get("role"))
        print(f"{who}: {msg.get('content')}")
    print()


# ---------------------------------------------------------------------------
# REPL
# ---------------------------------------------------------------------------


def run(args: argparse.Namespace) -> None:
    print("Type a message and press Enter. /history to reprint, /quit to exit.\n")
    print(f"[client] server  : {args.server}")
    print(f"[client] session : {args.session}\n")

    try:
        print_history(fetch_history(args))
    except requests.RequestException as exc:
        print(f"Could not load history: {exc}\n")

    while True:
        try:
            text = input("You: ").strip()
        except (EOFError, KeyboardInterrupt):
            print("\nBye.")
            return

        if not text:
            continue
        if text.lower() in {"/quit", "/exit"}:
            print("Bye.")
            return
        if text.lower() == "/history":
            try:
                print_history(fetch_history(args))
            except requests.RequestException as exc:
                print(f"Could not load history: {exc}\n")
            continue

        try:
            reply = send_chat(text, args)
        except requests.RequestException as exc:
            print(f"Request failed: {exc}\n")
            continue

        print(f"\nAssistant: {reply}\n")


def main() -> None:
    args = parse_args()
    try:
        run(args)
    except KeyboardInterrupt:
        print("\nBye.")
        sys.exit(0)


if __name__ == "__main__":
    main()
