# This file implements account registration, login, token issuance, and caller resolution.
# It exists so password hashing and JWT handling are confined to one module.
# Failed logins are counted per account; reaching the limit locks the account for a fixed window.
# Password hashes and lockout counters never leave this service.

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Any

import bcrypt
import jwt

from portfolio.api.services.resource_service import Document, ResourceService
from portfolio.catalog.descriptors import USERS
from portfolio.catalog.query_plan import AnyOf, Op
from portfolio.catalog.timestamps import format_timestamp, parse_timestamp, utc_now
from portfolio.common.errors import (
    AccountLockedError,
    AuthenticationError,
    ConflictError,
    ValidationError,
)

logger = logging.getLogger(__name__)

ACCESS = "access"
REFRESH = "refresh"
LOGGED_OUT = "loggedout"
DEFAULT_ROLE = "Viewer"

PRIVATE_FIELDS = frozenset({"passwordHash", "loginAttempts", "lockUntil", "passwordChangedAt"})


@dataclass(frozen=True)
class TokenPair:
    token: str
    refresh_token: str


def public_user(user: Document) -> Document:
    return {key: value for key, value in user.items() if key not in PRIVATE_FIELDS}


class AuthService(ResourceService):
    descriptor = USERS

    # Passwords

    def hash_password(self, password: str) -> str:
        salt = bcrypt.gensalt(rounds=self.config.bcrypt_rounds)
        return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")

    @staticmethod
    def verify_password(password: str, password_hash: str | None) -> bool:
        if not password_hash:
            return False
        try:
            return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
        except ValueError:
            logger.warning("Stored password hash could not be parsed")
            return False

    # Tokens

    def create_token(self, user_id: str, kind: str) -> str:
        issued_at = utc_now()
        days = self.config.jwt_access_ttl_days if kind == ACCESS else self.config.jwt_refresh_ttl_days
        payload = {
            "sub": user_id,
            "type": kind,
            "iat": issued_at,
            "exp": issued_at + timedelta(days=days),
        }
        return jwt.encode(payload, self.config.jwt_secret, algorithm=self.config.jwt_algorithm)

    def issue_tokens(self, user_id: str) -> TokenPair:
        return TokenPair(token=self.create_token(user_id, ACCESS), refresh_token=self.create_token(user_id, REFRESH))

    def decode_token(self, token: str, *, kind: str) -> dict[str, Any]:
        try:
            payload = jwt.decode(token, self.config.jwt_secret, algorithms=[self.config.jwt_algorithm])
        except jwt.PyJWTError as exc:
            raise AuthenticationError("Invalid token") from exc
        if payload.get("type") != kind or not payload.get("sub"):
            raise AuthenticationError("Invalid token")
        return payload

    # Accounts

    def find_by_email(self, email: str) -> Document | None:
        return self.store.find_one(self.collection, [self.where("email", Op.EQ, email.strip().lower())])

    def register(self, body: Document) -> tuple[Document, TokenPair]:
        email = body["email"]
        duplicate = AnyOf((self.where("email", Op.EQ, email), self.where("username", Op.EQ, body["username"])))
        if self.store.exists(self.collection, [duplicate]):
            raise ConflictError("User with this email or username already exists")
        user = self.create(
            {
                "username": body["username"],
                "email": email,
                "role": body.get("role") or DEFAULT_ROLE,
                "passwordHash": self.hash_password(body["password"]),
                "isActive": True,
                "loginAttempts": 0,
            }
        )
        logger.info("New user registered: %s", email)
        return public_user(user), self.issue_tokens(user["id"])

    def is_locked(self, user: Document) -> bool:
        lock_until = user.get("lockUntil")
        return bool(lock_until) and parse_timestamp(lock_until) > utc_now()

    def record_failed_login(self, user: Document) -> None:
        now = utc_now()
        max_attempts = self.config.max_login_attempts
        lock_window = timedelta(minutes=self.config.lock_time_minutes)

        def _count(body: Document) -> Document:
            lock_until = body.get("lockUntil")
            if lock_until and parse_timestamp(lock_until) <= now:
                body["loginAttempts"] = 1
                body.pop("lockUntil", None)
                return body
            attempts = int(body.get("loginAttempts") or 0) + 1
            body["loginAttempts"] = attempts
            if attempts >= max_attempts and not lock_until:
                body["lockUntil"] = format_timestamp(now + lock_window)
            return body

        self.store.modify(self.collection, user["id"], _count)

    def login(self, email: str | None, password: str | None) -> tuple[Document, TokenPair]:
        if not email or not password:
            raise ValidationError("Please provide email and password")
        user = self.find_by_email(email)
        if user is None or not self.verify_password(password, user.get("passwordHash")):
            if user is not None:
                self.record_failed_login(user)
            raise AuthenticationError("Invalid credentials")
        if self.is_locked(user):
            raise AccountLockedError()
        if not user.get("isActive", True):
            raise AuthenticationError("Account is deactivated")

        def _reset(body: Document) -> Document:
            body["loginAttempts"] = 0
            body.pop("lockUntil", None)
            body["lastLogin"] = format_timestamp(utc_now())
            return body

        updated = self.store.modify(self.collection, user["id"], _reset) or user
        logger.info("User logged in: %s", updated.get("email"))
        return public_user(updated), self.issue_tokens(updated["id"])

    def refresh(self, refresh_token: str | None) -> tuple[Document, TokenPair]:
        if not refresh_token or refresh_token == LOGGED_OUT:
            raise AuthenticationError("No refresh token provided")
        try:
            payload = self.decode_token(refresh_token, kind=REFRESH)
        except AuthenticationError as exc:
            raise AuthenticationError("Invalid refresh token") from exc
        user = self.store.get(self.collection, payload["sub"])
        if user is None or not user.get("isActive", True):
            raise AuthenticationError("Invalid refresh token")
        return public_user(user), self.issue_tokens(user["id"])

    def resolve_token(self, token: str) -> Document:
        """User behind an access token, after every account check."""

        payload = self.decode_token(token, kind=ACCESS)
        user = self.store.get(self.collection, payload["sub"])
        if user is None:
            raise AuthenticationError("The user belonging to this token does no longer exist")
        if not user.get("isActive", True):
            raise AuthenticationError("Your account has been deactivated")
        changed_at = user.get("passwordChangedAt")
        if changed_at and int(parse_timestamp(changed_at).timestamp()) > int(payload.get("iat", 0)):
            raise AuthenticationError("User recently changed password! Please log in again")
        return public_user(user)
