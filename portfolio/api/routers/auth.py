# This file defines account endpoints: register, login, logout, token refresh, and profile.
# It exists so token issuance and cookie handling share one code path across auth flows.
# Tokens are returned in the body and also set as httpOnly, same-site strict cookies.

from typing import Annotated

from fastapi import APIRouter, Depends, Request, Response, status

from portfolio.api.api_config import ApiConfig
from portfolio.api.dependencies import get_auth_service, get_config
from portfolio.api.rate_limits import auth_limit, limiter
from portfolio.api.response_envelope import build_message_envelope, build_object_envelope
from portfolio.api.schemas.auth_schemas import LoginRequest, RefreshRequest, RegisterRequest
from portfolio.api.security import Caller, CallerDep, require_permission
from portfolio.api.services.auth_service import DEFAULT_ROLE, LOGGED_OUT, AuthService, TokenPair
from portfolio.catalog.permissions import is_allowed

router = APIRouter(prefix="/auth", tags=["auth"])
AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]
ConfigDep = Annotated[ApiConfig, Depends(get_config)]

ACCESS_COOKIE = "jwt"
REFRESH_COOKIE = "refreshToken"
SECONDS_PER_DAY = 24 * 60 * 60
LOGOUT_COOKIE_SECONDS = 10


def _set_cookie(response: Response, config: ApiConfig, name: str, value: str, max_age: int) -> None:
    response.set_cookie(
        name,
        value,
        max_age=max_age,
        httponly=True,
        secure=config.cookie_secure,
        samesite="strict",
    )


def _issue(response: Response, config: ApiConfig, user: dict, tokens: TokenPair) -> dict[str, object]:
    _set_cookie(response, config, ACCESS_COOKIE, tokens.token, config.jwt_access_ttl_days * SECONDS_PER_DAY)
    _set_cookie(
        response,
        config,
        REFRESH_COOKIE,
        tokens.refresh_token,
        config.jwt_refresh_ttl_days * SECONDS_PER_DAY,
    )
    return build_object_envelope(
        {"user": user},
        token=tokens.token,
        refreshToken=tokens.refresh_token,
    )


@router.post("/register", status_code=status.HTTP_201_CREATED)
@limiter.limit(auth_limit)
def register(
    request: Request,
    response: Response,
    body: RegisterRequest,
    auth: AuthServiceDep,
    config: ConfigDep,
    caller: CallerDep,
) -> dict[str, object]:
    document = body.to_document()
    if not is_allowed("auth", "assign_role", caller.role):
        document["role"] = DEFAULT_ROLE
    user, tokens = auth.register(document)
    return _issue(response, config, user, tokens)


@router.post("/login")
@limiter.limit(auth_limit)
def login(
    request: Request,
    response: Response,
    body: LoginRequest,
    auth: AuthServiceDep,
    config: ConfigDep,
) -> dict[str, object]:
    user, tokens = auth.login(body.email, body.password)
    return _issue(response, config, user, tokens)


@router.post("/logout")
def logout(response: Response, config: ConfigDep) -> dict[str, object]:
    _set_cookie(response, config, ACCESS_COOKIE, LOGGED_OUT, LOGOUT_COOKIE_SECONDS)
    _set_cookie(response, config, REFRESH_COOKIE, LOGGED_OUT, LOGOUT_COOKIE_SECONDS)
    return build_message_envelope("Logged out successfully")


@router.post("/refresh-token")
@limiter.limit(auth_limit)
def refresh_token(
    request: Request,
    response: Response,
    auth: AuthServiceDep,
    config: ConfigDep,
    body: RefreshRequest | None = None,
) -> dict[str, object]:
    token = (body.refresh_token if body is not None else None) or request.cookies.get(REFRESH_COOKIE)
    user, tokens = auth.refresh(token)
    return _issue(response, config, user, tokens)


@router.get("/me")
def me(caller: Annotated[Caller, Depends(require_permission("auth", "me"))]) -> dict[str, object]:
    return build_object_envelope({"user": caller.user})
