"""
Unit tests for process settings.
"""

import pytest

from portfolio.common import settings as settings_module


def test_load_settings_normalizes_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ENV", " Production ")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    settings = settings_module.load_settings(load_env=False)

    assert settings.ENV == "production"
    assert settings.LOG_LEVEL == "DEBUG"
    assert settings.is_production


def test_load_settings_missing_required(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("JWT_SECRET", raising=False)
    with pytest.raises(RuntimeError, match="Missing required environment variables: JWT_SECRET"):
        settings_module.load_settings(load_env=False)


def test_load_settings_rejects_unknown_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ENV", "moon")
    with pytest.raises(RuntimeError, match="Invalid environment configuration"):
        settings_module.load_settings(load_env=False)
