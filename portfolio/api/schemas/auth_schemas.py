# This file defines request payloads for authentication endpoints.
# It exists so registration and login inputs are validated before any password hashing happens.

from __future__ import annotations

from typing import Literal

from portfolio.api.schemas.common import CamelModel, Email, bounded_text

UserRole = Literal["Admin", "Editor", "Viewer", "Manager"]


class RegisterRequest(CamelModel):
    username: bounded_text(30, min_length=3)
    email: Email
    password: bounded_text(100, min_length=6)
    role: UserRole = "Viewer"


class LoginRequest(CamelModel):
    email: str | None = None
    password: str | None = None


class RefreshRequest(CamelModel):
    refresh_token: str | None = None
