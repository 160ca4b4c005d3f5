import os
from dataclasses import dataclass


DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"


@dataclass(frozen=True)
class AIConfig:
    api_key: str
    model: str
    base_url: str
    timeout_s: float
    tokens_per_interval: int
    refill_interval_s: float
    max_attempts: int
    backoff_base_s: float


def _float_env(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, str(default)))
    except ValueError:
        return default


def _int_env(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)))
    except ValueError:
        return default


def load_ai_config() -> AIConfig:
    api_key = (os.getenv("GEMINI_API_KEY") or "").strip()
    model = (os.getenv("GEMINI_MODEL") or "gemini-pro").strip()
    base_url = (os.getenv("GEMINI_BASE_URL") or DEFAULT_BASE_URL).strip().rstrip("/")
    return AIConfig(
        api_key=api_key,
        model=model,
        base_url=base_url,
        timeout_s=_float_env("GEMINI_TIMEOUT_S", 30.0),
        tokens_per_interval=max(1, _int_env("GEMINI_TOKENS_PER_INTERVAL", 60)),
        refill_interval_s=max(0.001, _float_env("GEMINI_REFILL_INTERVAL_S", 60.0)),
        max_attempts=max(1, _int_env("GEMINI_MAX_ATTEMPTS", 3)),
        backoff_base_s=max(0.0, _float_env("GEMINI_BACKOFF_BASE_S", 1.0)),
    )
