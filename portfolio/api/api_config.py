# This file defines runtime settings for the API layer in one place.
# It exists so paging, token policy, upload limits, rate limits, and the AI provider can be configured without code edits.
# The config loader reads environment variables and applies safe defaults for local development.
# Missing secrets fail fast at startup instead of surfacing as request-time errors.

from __future__ import annotations

import os
from functools import lru_cache

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator


class ApiConfig(BaseModel):
    """Typed API runtime configuration."""

    model_config = ConfigDict(extra="ignore")

    api_name: str = "Company Portfolio API"
    api_version_path: str = "/api/v1"
    app_version: str = "1.0.0"
    host: str = "0.0.0.0"
    port: int = 8000
    environment: str = "local"
    database_url: str
    default_page_size: int = 20
    max_page_size: int = 100
    allowed_origins: list[str] = Field(default_factory=list)

    jwt_secret: str
    jwt_algorithm: str = "HS256"
    jwt_access_ttl_days: int = 7
    jwt_refresh_ttl_days: int = 30
    cookie_secure: bool = False
    bcrypt_rounds: int = 12
    max_login_attempts: int = 5
    lock_time_minutes: int = 120

    openai_api_key: str | None = None
    openai_model: str = "gpt-4o-mini"
    openai_base_url: str | None = None
    ai_temperature: float = 0.8
    ai_max_tokens: int = 1024
    ai_context_ttl_seconds: int = 300

    upload_path: str = "uploads"
    upload_base_url: str = "/uploads"
    max_file_size: int = 10 * 1024 * 1024

    search_max_workers: int = 5

    rate_limit_enabled: bool = True
    rate_limit_auth: str = "1000 per 15 minutes"
    rate_limit_contact: str = "100 per hour"
    rate_limit_search: str = "1000 per minute"
    rate_limit_ai: str = "500 per minute"

    contact_email: str = "contact@company.com"
    contact_phone: str = "+1-XXX-XXX-XXXX"

    @field_validator("api_version_path")
    @classmethod
    def validate_api_version_path(cls, value: str) -> str:
        if not value.startswith("/"):
            raise ValueError("api_version_path must start with '/'.")
        parts = [part for part in value.split("/") if part]
        if len(parts) < 2 or parts[-1].startswith("v") is False:
            raise ValueError("api_version_path must look like '/api/v1'.")
        return value.rstrip("/")

    @field_validator(
        "default_page_size",
        "max_page_size",
        "jwt_access_ttl_days",
        "jwt_refresh_ttl_days",
        "max_login_attempts",
        "lock_time_minutes",
        "ai_context_ttl_seconds",
        "max_file_size",
        "search_max_workers",
    )
    @classmethod
    def validate_positive_ints(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("Value must be greater than 0.")
        return value

    @field_validator("bcrypt_rounds")
    @classmethod
    def validate_bcrypt_rounds(cls, value: int) -> int:
        if not 4 <= value <= 31:
            raise ValueError("bcrypt_rounds must be between 4 and 31.")
        return value

    @property
    def ai_configured(self) -> bool:
        return bool(self.openai_api_key)

    def contact_info(self) -> dict[str, str]:
        return {"email": self.contact_email, "phone": self.contact_phone}


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    value = raw.strip().lower()
    if value in {"1", "true", "yes", "y", "on"}:
        return True
    if value in {"0", "false", "no", "n", "off"}:
        return False
    raise ValueError(f"{name} must be boolean-like, got {raw!r}")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return int(raw)


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return float(raw)


def _env_list(name: str, default: list[str] | None = None) -> list[str]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return list(default or [])
    return [item.strip() for item in raw.split(",") if item.strip()]


def load_api_config(*, load_env: bool = True) -> ApiConfig:
    """Load API configuration from `.env` and process environment."""

    if load_env:
        load_dotenv()

    config_values: dict[str, object] = {
        "api_name": os.getenv("API_NAME", "Company Portfolio API"),
        "api_version_path": os.getenv("API_VERSION_PATH", "/api/v1"),
        "app_version": os.getenv("APP_VERSION", "1.0.0"),
        "host": os.getenv("API_HOST", "0.0.0.0"),
        "port": _env_int("API_PORT", 8000),
        "environment": os.getenv("ENV", "local"),
        "database_url": os.getenv("DATABASE_URL", ""),
        "default_page_size": _env_int("API_DEFAULT_PAGE_SIZE", 20),
        "max_page_size": _env_int("API_MAX_PAGE_SIZE", 100),
        "allowed_origins": _env_list("API_ALLOWED_ORIGINS", []),
        "jwt_secret": os.getenv("JWT_SECRET", ""),
        "jwt_algorithm": os.getenv("JWT_ALGORITHM", "HS256"),
        "jwt_access_ttl_days": _env_int("JWT_EXPIRES_IN_DAYS", 7),
        "jwt_refresh_ttl_days": _env_int("JWT_REFRESH_EXPIRES_IN_DAYS", 30),
        "cookie_secure": _env_bool("COOKIE_SECURE", os.getenv("ENV", "local") == "production"),
        "bcrypt_rounds": _env_int("BCRYPT_ROUNDS", 12),
        "max_login_attempts": _env_int("MAX_LOGIN_ATTEMPTS", 5),
        "lock_time_minutes": _env_int("LOCK_TIME_MINUTES", 120),
        "openai_api_key": os.getenv("OPENAI_API_KEY") or None,
        "openai_model": os.getenv("OPENAI_MODEL", "gpt-4o-mini"),
        "openai_base_url": os.getenv("OPENAI_BASE_URL") or None,
        "ai_temperature": _env_float("AI_TEMPERATURE", 0.8),
        "ai_max_tokens": _env_int("AI_MAX_TOKENS", 1024),
        "ai_context_ttl_seconds": _env_int("AI_CONTEXT_TTL_SECONDS", 300),
        "upload_path": os.getenv("UPLOAD_PATH", "uploads"),
        "upload_base_url": os.getenv("UPLOAD_BASE_URL", "/uploads"),
        "max_file_size": _env_int("MAX_FILE_SIZE", 10 * 1024 * 1024),
        "search_max_workers": _env_int("SEARCH_MAX_WORKERS", 5),
        "rate_limit_enabled": _env_bool("RATE_LIMIT_ENABLED", True),
        "rate_limit_auth": os.getenv("RATE_LIMIT_AUTH", "1000 per 15 minutes"),
        "rate_limit_contact": os.getenv("RATE_LIMIT_CONTACT", "100 per hour"),
        "rate_limit_search": os.getenv("RATE_LIMIT_SEARCH", "1000 per minute"),
        "rate_limit_ai": os.getenv("RATE_LIMIT_AI", "500 per minute"),
        "contact_email": os.getenv("CONTACT_EMAIL", "contact@company.com"),
        "contact_phone": os.getenv("CONTACT_PHONE", "+1-XXX-XXX-XXXX"),
    }
    if not config_values["database_url"]:
        raise RuntimeError("DATABASE_URL is required for API startup.")
    if not config_values["jwt_secret"]:
        raise RuntimeError("JWT_SECRET is required for API startup.")

    return ApiConfig.model_validate(config_values)


@lru_cache(maxsize=1)
def get_api_config() -> ApiConfig:
    """Cached accessor for API config."""

    return load_api_config()
