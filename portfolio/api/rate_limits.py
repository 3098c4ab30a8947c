# This file configures per-client request throttling for public write and search endpoints.
# It exists so abusive callers are slowed down before they reach the database or the AI provider.
# Limits are keyed by remote address and held in process memory.
# Limit strings come from API config so operators can tune them per environment.

from __future__ import annotations

from fastapi import FastAPI
from slowapi import Limiter
from slowapi.util import get_remote_address

from portfolio.api.api_config import ApiConfig, get_api_config

limiter = Limiter(key_func=get_remote_address)


def auth_limit() -> str:
    return get_api_config().rate_limit_auth


def contact_limit() -> str:
    return get_api_config().rate_limit_contact


def search_limit() -> str:
    return get_api_config().rate_limit_search


def ai_limit() -> str:
    return get_api_config().rate_limit_ai


def setup_rate_limiting(app: FastAPI, config: ApiConfig) -> None:
    """Attach the shared limiter to the app; the 429 handler lives with the other error handlers."""

    limiter.enabled = config.rate_limit_enabled
    app.state.limiter = limiter
