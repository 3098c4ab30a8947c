"""
Shared test configuration.
Environment defaults are applied before the application module is imported so the cached
API config resolves against a throwaway SQLite database with fast password hashing.
"""

from __future__ import annotations

import os
import sys
import tempfile
from pathlib import Path

import pytest

ROOT_DIR = Path(__file__).resolve().parent.parent
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

_SCRATCH_DIR = Path(tempfile.mkdtemp(prefix="portfolio-tests-"))

TEST_ENV_DEFAULTS = {
    "PROJECT_NAME": "test-portfolio",
    "ENV": "test",
    "LOG_LEVEL": "INFO",
    "DATABASE_URL": f"sqlite:///{_SCRATCH_DIR / 'startup.db'}",
    "JWT_SECRET": "test-jwt-secret",
    "BCRYPT_ROUNDS": "4",
    "RATE_LIMIT_ENABLED": "false",
    "UPLOAD_PATH": str(_SCRATCH_DIR / "uploads"),
}

for _key, _value in TEST_ENV_DEFAULTS.items():
    os.environ.setdefault(_key, _value)


@pytest.fixture(autouse=True)
def base_test_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Ensure required environment variables are present during tests."""

    for key, value in TEST_ENV_DEFAULTS.items():
        if os.getenv(key) is None:
            monkeypatch.setenv(key, value)
