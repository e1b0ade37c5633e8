"""
Environment-driven settings.

Every value is read on call so tests can monkeypatch the environment.
"""

from __future__ import annotations

import os


def env_str(name: str, default: str) -> str:
    return os.environ.get(name, default).strip() or default


def env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def cors_origins() -> list[str]:
    raw = os.environ.get("CORS_ORIGINS", "").strip()
    if not raw:
        return ["http://localhost:3000", "http://127.0.0.1:3000"]
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


def toggle_timeout_s() -> float:
    return env_float("TOGGLE_TIMEOUT_S", 5.0)


def default_list_limit() -> int:
    return env_int("DEFAULT_LIST_LIMIT", 50)


def max_list_limit() -> int:
    return env_int("MAX_LIST_LIMIT", 200)


def log_level() -> str:
    return env_str("LOG_LEVEL", "INFO").upper()


def log_format() -> str:
    return env_str("LOG_FORMAT", "text").lower()
