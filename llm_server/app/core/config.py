# app/core/config.py
# -*- coding: utf-8 -*-
"""
Simple Chat Box Server — Configuration
--------------------------------------
Central configuration for the chat server, including:

- app metadata
- API host/port
- session storage backend (in-memory or JSON files on disk)
- Workers AI credentials for the inference call.

The model id, the system prompt and the history cap are NOT settings:
they live as literals in app/core/conversation.py and
app/providers/workers_ai.py.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# ---------------------------------------------------------------------------
# Path helpers
# ---------------------------------------------------------------------------

# This file is: llm_server/app/core/config.py
APP_DIR: Path = Path(__file__).resolve().parents[1]   # .../llm_server/app
ROOT_DIR: Path = APP_DIR.parent                       # .../llm_server

WEB_DIR: Path = APP_DIR / "web"
SESSIONS_DIR: Path = ROOT_DIR / "data" / "sessions"


# ---------------------------------------------------------------------------
# Settings model
# ---------------------------------------------------------------------------


class Settings(BaseSettings):
    """
    Global configuration for the chat server.

    Instantiated once at import time as `settings`. Tests build their own
    instances and pass them to app.main.create_app().
    """

    model_config = SettingsConfigDict(
        env_file=ROOT_DIR / ".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # --- App / server basics -----------------------------------------------
    app_name: str = "Simple Chat Box Server"
    environment: Literal["development", "production", "test"] = "development"
    debug: bool = True

    api_host: str = "0.0.0.0"
    api_port: int = 8000

    # --- Filesystem paths ---------------------------------------------------
    web_dir: Path = WEB_DIR

    # --- Session storage ----------------------------------------------------
    # "file"   -> one JSON file per session under sessions_dir
    # "memory" -> process-local dict, lost on restart
    storage_backend: Literal["file", "memory"] = "file"
    sessions_dir: Path = SESSIONS_DIR

    # --- Inference: Cloudflare Workers AI ----------------------------------
    # ENV: WORKERS_AI_ACCOUNT_ID / WORKERS_AI_API_TOKEN
    workers_ai_account_id: Optional[str] = Field(
        default=None,
        description="Cloudflare account id (env: WORKERS_AI_ACCOUNT_ID).",
    )
    workers_ai_api_token: Optional[str] = Field(
        default=None,
        description="Workers AI API token (env: WORKERS_AI_API_TOKEN).",
    )
    workers_ai_base_url: str = "https://api.cloudflare.com/client/v4/accounts"

    # None means the HTTP client waits as long as the remote end does.
    workers_ai_timeout_s: Optional[float] = 60.0

    @property
    def inference_configured(self) -> bool:
        return bool(self.workers_ai_account_id and self.workers_ai_api_token)


# Single global settings instance used by the rest of the app.
settings = Settings()


if __name__ == "__main__":
    print("Simple Chat Box — Settings self-test")
    print(f"ROOT_DIR        : {ROOT_DIR}")
    print(f"WEB_DIR         : {settings.web_dir}")
    print(f"Environment     : {settings.environment}")
    print(f"Storage backend : {settings.storage_backend}")
    print(f"Sessions dir    : {settings.sessions_dir}")
    print(f"Workers AI set  : {settings.inference_configured}")
