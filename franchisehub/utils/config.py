"""Runtime configuration sourced from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import List


def _int_env(name: str, default: int) -> int:
    """Return an integer environment value, falling back on blanks or junk."""
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return int(value.strip())
    except ValueError:
        return default


def _list_env(name: str, default: str) -> List[str]:
    raw = os.getenv(name, default)
    return [item.strip() for item in raw.split(",") if item.strip()]


@dataclass(frozen=True)
class Settings:
    jwt_secret: str
    jwt_algorithm: str = "HS256"
    jwt_expiry_hours: int = 24
    archive_after_days: int = 7
    invite_expiry_days: int = 7
    password_reset_minutes: int = 15
    cors_origins: List[str] = field(default_factory=list)


@lru_cache(maxsize=None)
def get_settings() -> Settings:
    """Return the cached settings; call ``get_settings.cache_clear()`` after env changes."""
    return Settings(
        jwt_secret=os.getenv("JWT_SECRET", "change-me"),
        jwt_algorithm=os.getenv("JWT_ALGORITHM", "HS256"),
        jwt_expiry_hours=_int_env("JWT_EXPIRY_HOURS", 24),
        archive_after_days=_int_env("ARCHIVE_AFTER_DAYS", 7),
        invite_expiry_days=_int_env("INVITE_EXPIRY_DAYS", 7),
        password_reset_minutes=_int_env("PASSWORD_RESET_MINUTES", 15),
        cors_origins=_list_env("CORS_ORIGINS", "http://localhost:3000,http://localhost:5173"),
    )
