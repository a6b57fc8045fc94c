# backend/portal/config.py
"""
Runtime settings read from the environment.

`.env` is loaded once on import (python-dotenv). Values are read lazily by
the helpers below so tests can monkeypatch the environment per case.
"""
from __future__ import annotations

import os
from typing import List

from dotenv import load_dotenv

load_dotenv()

APP_NAME = "Church Competition Portal"

# Plaintext UI lock for the organizer area. NOT access control: the value is a
# shared constant compared as-is, there is no per-user identity behind it.
DEFAULT_ORGANIZER_PASSKEY = "CHURCH2025ADMIN"

DEFAULT_DATABASE_URL = "sqlite:///./portal.db"


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return str(raw).strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)))
    except (TypeError, ValueError):
        return default


def _env_list(name: str, default: List[str]) -> List[str]:
    raw = os.getenv(name)
    if not raw:
        return list(default)
    return [p.strip() for p in raw.split(",") if p.strip()]


def database_url() -> str:
    return os.getenv("DATABASE_URL") or DEFAULT_DATABASE_URL


def sql_echo() -> bool:
    return _env_bool("SQL_ECHO", False)


def organizer_passkey() -> str:
    return os.getenv("ORGANIZER_PASSKEY") or DEFAULT_ORGANIZER_PASSKEY


def session_ttl_hours() -> int:
    return max(1, _env_int("SESSION_TTL_HOURS", 12))


def session_token_pepper() -> str:
    return os.getenv("SESSION_TOKEN_PEPPER", "")


def cors_origins() -> List[str]:
    return _env_list(
        "CORS_ORIGINS",
        [
            "http://localhost:3000", "http://127.0.0.1:3000",
            "http://localhost:5173", "http://127.0.0.1:5173",
        ],
    )


def local_tz() -> str:
    return os.getenv("TZ", "Asia/Kolkata")


def log_level() -> str:
    return os.getenv("LOG_LEVEL", "INFO").upper()
