# app/providers/workers_ai.py
# -*- coding: utf-8 -*-
"""
Simple Chat Box Server — Inference provider (Cloudflare Workers AI)
-------------------------------------------------------------------
This module is the ONLY place that knows how to talk to Workers AI.

Responsibilities:
- Build the HTTP request (URL, headers, JSON payload).
- Unwrap the Cloudflare envelope:
      {"success": true, "result": {...}, "errors": [], "messages": []}
- Return `result` untouched. Turning it into text is the job of
  app.core.conversation.extract_reply_text, because the result shape
  differs between models.

It is used by app.core.conversation.ConversationManager through the
InferenceEngine protocol. There is no retry and no fallback model: any
failure raises InferenceError and the request fails.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Optional

import requests

from app.core.config import Settings
from app.core.types import ChatMessage

logger = logging.getLogger(__name__)

MODEL_ID = "@cf/meta/llama-3.3-70b-instruct-fp8-fast"


class InferenceError(Exception):
    """Raised when the Workers AI call fails."""


def build_run_url(base_url: str, account_id: str, model: str = MODEL_ID) -> str:
    """
    REST endpoint for one model run, e.g.

        https://api.cloudflare.com/client/v4/accounts/<id>/ai/run/@cf/meta/...
    """
    return f"{base_url.rstrip('/')}/{account_id}/ai/run/{model}"


def call_workers_ai(
    messages: List[ChatMessage],
    *,
    account_id: Optional[str],
    api_token: Optional[str],
    base_url: str,
    timeout_s: Optional[float],
    model: str = MODEL_ID,
) -> Any:
    """
    Run `model` on Workers AI and return the `result` object.

    Parameters
    ----------
    messages:
        List of {"role": "system"|"user"|"assistant", "content": "..."} dicts.

    Raises
    ------
    InferenceError
        If credentials are missing, or the HTTP/JSON/envelope check fails.
    """
    if not account_id or not api_token:
        raise InferenceError(
            "Workers AI is not configured. "
            "Set WORKERS_AI_ACCOUNT_ID and WORKERS_AI_API_TOKEN in your .env."
        )

    url = build_run_url(base_url, account_id, model)
    headers = {
        "Authorization": f"Bearer {api_token}",
        "Content-Type": "application/json",
    }
    payload: Dict[str, Any] = {"messages": messages}

    try:
        resp = requests.post(url, headers=headers, json=payload, timeout=timeout_s)
    except requests.RequestException as exc:
        raise InferenceError(f"Workers AI HTTP error: {exc}") from exc

    if resp.status_code != 200:
        text_preview = resp.text[:200].replace("\n", " ")
        raise InferenceError(f"Workers AI HTTP {resp.status_code}: {text_preview}")

    try:
        data = resp.json()
    except ValueError as exc:
        raise InferenceError("Workers AI returned non-JSON response.") from exc

    if not isinstance(data, dict) or "result" not in data:
        raise InferenceError("Workers AI response JSON missing 'result'.")

    if data.get("success") is False:
        raise InferenceError(f"Workers AI reported failure: {data.get('errors')}")

    return data["result"]


class WorkersAIEngine:
    """
    InferenceEngine backed by call_workers_ai().

    requests is blocking, so each call runs in a worker thread and the event
    loop stays free for other sessions.
    """

    def __init__(
        self,
        account_id: Optional[str],
        api_token: Optional[str],
        base_url: str,
        timeout_s: Optional[float] = 60.0,
        model: str = MODEL_ID,
    ) -> None:
        self.account_id = account_id
        self.api_token = api_token
        self.base_url = base_url
        self.timeout_s = timeout_s
        self.model = model

    @classmethod
    def from_settings(cls, settings: Settings) -> "WorkersAIEngine":
        if not settings.inference_configured:
            logger.warning(
                "Workers AI credentials are not set; /chat will fail until they are."
            )
        return cls(
            account_id=settings.workers_ai_account_id,
            api_token=settings.workers_ai_api_token,
            base_url=settings.workers_ai_base_url,
            timeout_s=settings.workers_ai_timeout_s,
        )

    async def run(self, messages: List[ChatMessage]) -> Any:
        return await asyncio.to_thread(
            call_workers_ai,
            messages,
            account_id=self.account_id,
            api_token=self.api_token,
            base_url=self.base_url,
            timeout_s=self.timeout_s,
            model=self.model,
        )
