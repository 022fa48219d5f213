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


def _get_env_list(name: str, default: list[str]) -> tuple[str, ...]:
    raw = _get_env(name, None)
    if raw is None:
        return tuple(default)
    values = [item.strip() for item in raw.split(",")]
    clean = [item for item in values if item]
    return tuple(clean) if clean else tuple(default)


@dataclass(frozen=True)
class Settings:
    rate_limit: str
    rate_limit_enabled: bool
    log_level: str
    sentry_dsn: str | None
    cors_allowed_origins: tuple[str, ...]
    cors_allow_origin_regex: str | None
    cors_allow_credentials: bool
    trust_x_forwarded_for: bool
    appwrite_endpoint: str
    appwrite_project_id: str
    appwrite_database_id: str
    appwrite_profiles_table_id: str
    appwrite_courses_table_id: str
    appwrite_pathways_table_id: str
    appwrite_timeout_s: float
    analytics_row_limit: int
    analytics_required_label: str
    insights_cache_ttl_s: int
    insights_llm_enabled: bool
    insights_model: str
    insights_timeout_s: float
    openrouter_api_key: str | None
    openrouter_base_url: str
    app_url: str
    insights_runs_db_path: str
    insights_runs_retention_days: int


settings = Settings(
    rate_limit=_get_env("RATE_LIMIT", "60/minute") or "60/minute",
    rate_limit_enabled=_get_env_bool("RATE_LIMIT_ENABLED", True),
    log_level=_get_env("LOG_LEVEL", "INFO") or "INFO",
    sentry_dsn=_get_env("SENTRY_DSN"),
    cors_allowed_origins=_get_env_list(
        "CORS_ALLOWED_ORIGINS",
        [
            "http://localhost:3000",
            "http://127.0.0.1:3000",
            "http://[::1]:3000",
        ],
    ),
    cors_allow_origin_regex=_get_env("CORS_ALLOW_ORIGIN_REGEX", r"^https:\/\/[a-z0-9-]+-.*\.vercel\.app$"),
    cors_allow_credentials=_get_env_bool("CORS_ALLOW_CREDENTIALS", False),
    trust_x_forwarded_for=_get_env_bool("TRUST_X_FORWARDED_FOR", False),
    appwrite_endpoint=(_get_env("APPWRITE_ENDPOINT", "https://cloud.appwrite.io/v1") or "").rstrip("/"),
    appwrite_project_id=_get_env("APPWRITE_PROJECT_ID", "") or "",
    appwrite_database_id=_get_env("APPWRITE_DATABASE_ID", "skillsync") or "skillsync",
    appwrite_profiles_table_id=_get_env("APPWRITE_PROFILES_TABLE_ID", "user_profiles") or "user_profiles",
    appwrite_courses_table_id=_get_env("APPWRITE_COURSES_TABLE_ID", "user_courses") or "user_courses",
    appwrite_pathways_table_id=_get_env("APPWRITE_PATHWAYS_TABLE_ID", "user_pathways") or "user_pathways",
    appwrite_timeout_s=_get_env_float("APPWRITE_TIMEOUT_S", 15.0),
    analytics_row_limit=_get_env_int("ANALYTICS_ROW_LIMIT", 5000),
    analytics_required_label=_get_env("ANALYTICS_REQUIRED_LABEL", "university") or "university",
    insights_cache_ttl_s=_get_env_int("INSIGHTS_CACHE_TTL_S", 24 * 60 * 60),
    insights_llm_enabled=_get_env_bool("INSIGHTS_LLM_ENABLED", True),
    insights_model=_get_env("INSIGHTS_MODEL", "perplexity/sonar") or "perplexity/sonar",
    insights_timeout_s=_get_env_float("INSIGHTS_TIMEOUT_S", 60.0),
    openrouter_api_key=_get_env("OPENROUTER_API_KEY"),
    openrouter_base_url=_get_env("OPENROUTER_BASE_URL", "https://openrouter.ai/api/v1") or "https://openrouter.ai/api/v1",
    app_url=_get_env("APP_URL", "http://localhost:3000") or "http://localhost:3000",
    insights_runs_db_path=_get_env("INSIGHTS_RUNS_DB_PATH", "data/insight_runs.db") or "data/insight_runs.db",
    insights_runs_retention_days=_get_env_int("INSIGHTS_RUNS_RETENTION_DAYS", 90),
)

if settings.analytics_row_limit < 1:
    raise RuntimeError("ANALYTICS_ROW_LIMIT must be a positive integer.")
