"""
Process-wide settings for the portfolio API.
Only the values every entrypoint needs live here: project name, deployment environment,
log level, database location, and the token signing secret. API tuning knobs are in
`portfolio.api.api_config`.
"""

from __future__ import annotations

import os
from functools import lru_cache
from typing import Final

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

REQUIRED_ENV_VARS: Final[tuple[str, ...]] = (
    "PROJECT_NAME",
    "ENV",
    "LOG_LEVEL",
    "DATABASE_URL",
    "JWT_SECRET",
)
ENVIRONMENTS: Final[frozenset[str]] = frozenset({"local", "test", "staging", "production"})
LOG_LEVELS: Final[frozenset[str]] = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})


class Settings(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    PROJECT_NAME: str
    ENV: str
    LOG_LEVEL: str
    DATABASE_URL: str
    JWT_SECRET: str

    @field_validator("ENV")
    @classmethod
    def validate_environment(cls, value: str) -> str:
        env = value.strip().lower()
        if env not in ENVIRONMENTS:
            raise ValueError(f"ENV must be one of {sorted(ENVIRONMENTS)}")
        return env

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"LOG_LEVEL must be one of {sorted(LOG_LEVELS)}")
        return level

    @property
    def is_production(self) -> bool:
        return self.ENV == "production"


def load_settings(*, load_env: bool = True) -> Settings:
    """Read `.env` (optionally) and the process environment; raise RuntimeError on gaps."""

    if load_env:
        load_dotenv()

    missing = sorted(key for key in REQUIRED_ENV_VARS if not os.getenv(key))
    if missing:
        raise RuntimeError(
            f"Missing required environment variables: {', '.join(missing)}. "
            "Set them in `.env` or the process environment before starting the API."
        )

    try:
        return Settings.model_validate({key: os.environ[key] for key in REQUIRED_ENV_VARS})
    except ValidationError as exc:
        raise RuntimeError(f"Invalid environment configuration: {exc}") from exc


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()
