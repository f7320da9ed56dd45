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
    api_key: str | None
    rate_limit: str
    rate_limit_enabled: bool
    log_level: str
    sentry_dsn: str | None
    llm_enabled: bool
    llm_timeout_s: float
    judge_enabled: bool
    judge_retry_borderline: bool
    show_unjudged_suggestions: bool
    metrics_enabled: bool
    metrics_db_path: str
    metrics_retention_days: int
    max_jd_chars: int
    max_section_chars: int


settings = Settings(
    api_key=_get_env("API_KEY"),
    rate_limit=_get_env("RATE_LIMIT", "30/minute") or "30/minute",
    rate_limit_enabled=_get_env_bool("RATE_LIMIT_ENABLED", True),
    log_level=_get_env("LOG_LEVEL", "INFO") or "INFO",
    sentry_dsn=_get_env("SENTRY_DSN"),
    llm_enabled=_get_env_bool("LLM_ENABLED", True),
    llm_timeout_s=_get_env_float("LLM_TIMEOUT_S", 60.0),
    judge_enabled=_get_env_bool("JUDGE_ENABLED", True),
    judge_retry_borderline=_get_env_bool("JUDGE_RETRY_BORDERLINE", True),
    show_unjudged_suggestions=_get_env_bool("SHOW_UNJUDGED_SUGGESTIONS", True),
    metrics_enabled=_get_env_bool("METRICS_ENABLED", True),
    metrics_db_path=_get_env("METRICS_DB_PATH", "data/quality_metrics.db") or "data/quality_metrics.db",
    metrics_retention_days=_get_env_int("METRICS_RETENTION_DAYS", 90),
    max_jd_chars=_get_env_int("MAX_JD_CHARS", 6000),
    max_section_chars=_get_env_int("MAX_SECTION_CHARS", 4000),
)

if settings.llm_timeout_s <= 0:
    raise RuntimeError("LLM_TIMEOUT_S must be a positive number of seconds.")

__all__ = ["Settings", "settings"]
