# This file resolves the calling user and enforces the role table on routes.
# It exists so routers declare an (entity, action) pair instead of restating role lists.
# Callers are read from a Bearer header or the `jwt` cookie; no token means anonymous.
# A present but invalid token is rejected even on public routes.

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Annotated, Any

from fastapi import Depends, Request

from portfolio.api.dependencies import get_auth_service
from portfolio.api.services.auth_service import LOGGED_OUT, AuthService
from portfolio.catalog.descriptors import PRIVILEGED_ROLES
from portfolio.catalog.permissions import check_permission


@dataclass(frozen=True)
class Caller:
    id: str | None = None
    role: str | None = None
    user: dict[str, Any] = field(default_factory=dict)

    @property
    def authenticated(self) -> bool:
        return self.id is not None

    @property
    def privileged(self) -> bool:
        return self.role in PRIVILEGED_ROLES


ANONYMOUS = Caller()


def extract_token(request: Request) -> str | None:
    header = request.headers.get("authorization", "")
    scheme, _, credentials = header.partition(" ")
    if scheme.lower() == "bearer" and credentials.strip():
        return credentials.strip()
    cookie = request.cookies.get("jwt")
    if cookie and cookie != LOGGED_OUT:
        return cookie
    return None


def get_optional_caller(
    request: Request,
    auth: Annotated[AuthService, Depends(get_auth_service)],
) -> Caller:
    token = extract_token(request)
    if token is None:
        return ANONYMOUS
    user = auth.resolve_token(token)
    return Caller(id=user["id"], role=user.get("role"), user=user)


CallerDep = Annotated[Caller, Depends(get_optional_caller)]


def require_permission(entity: str, action: str) -> Callable[[Caller], Caller]:
    """Dependency factory: the resolved caller, after the role check for (entity, action)."""

    def _dependency(caller: CallerDep) -> Caller:
        check_permission(entity, action, caller.role)
        return caller

    return _dependency
