"""
Decide to Run — Centralized configuration.

Loads all settings from .env and validates required keys.
This module is the foundation for every other module in the project.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, field_validator

# Load .env from project root (two levels up from decide_to_run/config.py)
_ENV_PATH = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_ENV_PATH)


class Settings(BaseModel):
    """Application settings loaded from environment variables."""

    # Telegram
    TELEGRAM_BOT_TOKEN: str

    # Storage backends: "sqlite" | "supabase"
    OFFICE_BACKEND: str = "sqlite"
    PROGRESS_BACKEND: str = "sqlite"

    # SQLite
    DATABASE_PATH: str = "data/decide_to_run.db"

    # Hosted backend (only needed when a backend is "supabase")
    SUPABASE_URL: str = ""
    SUPABASE_KEY: str = ""
    HTTP_TIMEOUT_SECONDS: float = 10.0

    # Security — empty list means the bot is open to everyone
    ALLOWED_USER_IDS: list[int] = []

    @field_validator("ALLOWED_USER_IDS", mode="before")
    @classmethod
    def parse_user_ids(cls, v: str | list[int]) -> list[int]:
        if isinstance(v, list):
            return v
        if isinstance(v, str) and v.strip():
            return [int(uid.strip()) for uid in v.split(",") if uid.strip()]
        return []

    @field_validator("HTTP_TIMEOUT_SECONDS", mode="before")
    @classmethod
    def parse_timeout(cls, v: str | float) -> float:
        return float(v)

    @field_validator("OFFICE_BACKEND", "PROGRESS_BACKEND", mode="before")
    @classmethod
    def normalize_backend(cls, v: str) -> str:
        return (v or "sqlite").strip().lower()


def _load_settings() -> Settings:
    """Load settings from environment, validating required keys."""
    token = os.getenv("TELEGRAM_BOT_TOKEN", "")

    if not token or token.startswith("your-"):
        print("ERROR: TELEGRAM_BOT_TOKEN is missing or not set in .env", file=sys.stderr)
        sys.exit(1)

    return Settings(
        TELEGRAM_BOT_TOKEN=token,
        OFFICE_BACKEND=os.getenv("OFFICE_BACKEND", "sqlite"),
        PROGRESS_BACKEND=os.getenv("PROGRESS_BACKEND", "sqlite"),
        DATABASE_PATH=os.getenv("DATABASE_PATH", "data/decide_to_run.db"),
        SUPABASE_URL=os.getenv("SUPABASE_URL", ""),
        SUPABASE_KEY=os.getenv("SUPABASE_KEY", ""),
        HTTP_TIMEOUT_SECONDS=os.getenv("HTTP_TIMEOUT_SECONDS", "10"),
        ALLOWED_USER_IDS=os.getenv("ALLOWED_USER_IDS", ""),
    )


# Singleton — imported by all other modules as:
#   from decide_to_run.config import settings
settings = _load_settings()
