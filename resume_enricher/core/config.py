from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()

def _get_env(name: str, default: str | None = None) -> str | None:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return value


def _get_env_bool(name: str, default: bool) -> bool:
    raw = _get_env(name, None)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _get_env_int(name: str, default: int) -> int:
    raw = _get_env(name, None)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _get_env_float(name: str, default: float) -> float:
    raw = _get_env(name, None)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    jwt_secret: str
    jwt_expires_minutes: int
    auth_username: str | None
    auth_password: str | None
    rate_limit: str
    rate_limit_enabled: bool
    log_level: str
    sentry_dsn: str | None
    applicant_db_path: str
    enrich_timeout_s: float


settings = Settings(
    jwt_secret=_get_env("JWT_SECRET", "change-me") or "change-me",
    jwt_expires_minutes=_get_env_int("JWT_EXPIRES_MINUTES", 60),
    auth_username=_get_env("AUTH_USERNAME"),
    auth_password=_get_env("AUTH_PASSWORD"),
    rate_limit=_get_env("RATE_LIMIT", "60/minute") or "60/minute",
    rate_limit_enabled=_get_env_bool("RATE_LIMIT_ENABLED", True),
    log_level=_get_env("LOG_LEVEL", "INFO") or "INFO",
    sentry_dsn=_get_env("SENTRY_DSN"),
    applicant_db_path=_get_env("APPLICANT_DB_PATH", "data/applicants.db") or "data/applicants.db",
    enrich_timeout_s=_get_env_float("ENRICH_TIMEOUT_S", 60.0),
)

if settings.jwt_expires_minutes < 1:
    raise RuntimeError("JWT_EXPIRES_MINUTES must be a positive number of minutes.")
