"""
Error taxonomy shared by the query core, services, and HTTP layer.
Each error carries the HTTP status and a stable machine code; the API error handlers
render them into the uniform `{success: false, error: ...}` envelope.
"""

from __future__ import annotations

from typing import Any


class APIError(Exception):
    """Domain error type with structured API details."""

    def __init__(
        self,
        *,
        status_code: int,
        error_code: str,
        message: str,
        details: Any | None = None,
    ) -> None:
        self.status_code = status_code
        self.error_code = error_code
        self.message = message
        self.details = details
        super().__init__(message)


class ValidationError(APIError):
    """Malformed or missing input."""

    def __init__(self, message: str, *, details: Any | None = None) -> None:
        super().__init__(
            status_code=400,
            error_code="VALIDATION_ERROR",
            message=message,
            details=details,
        )


class AuthenticationError(APIError):
    """Missing or invalid credential."""

    def __init__(self, message: str = "You are not logged in! Please log in to get access") -> None:
        super().__init__(status_code=401, error_code="AUTHENTICATION_ERROR", message=message)


class AuthorizationError(APIError):
    """Authenticated caller without the required role."""

    def __init__(self, message: str = "You do not have permission to perform this action") -> None:
        super().__init__(status_code=403, error_code="AUTHORIZATION_ERROR", message=message)


class NotFoundError(APIError):
    def __init__(self, message: str = "Document not found") -> None:
        super().__init__(status_code=404, error_code="NOT_FOUND", message=message)


class ConflictError(APIError):
    """Uniqueness violation on a unique key."""

    def __init__(self, message: str, *, details: Any | None = None) -> None:
        super().__init__(
            status_code=409,
            error_code="CONFLICT",
            message=message,
            details=details,
        )


class AccountLockedError(APIError):
    def __init__(self) -> None:
        super().__init__(
            status_code=423,
            error_code="ACCOUNT_LOCKED",
            message="Account temporarily locked due to too many failed login attempts",
        )


class UpstreamUnavailableError(APIError):
    """Provider not configured or unreachable; always paired with a fallback payload."""

    def __init__(self, message: str, *, fallback: dict[str, Any]) -> None:
        super().__init__(
            status_code=503,
            error_code="UPSTREAM_UNAVAILABLE",
            message=message,
        )
        self.fallback = fallback


class InternalError(APIError):
    def __init__(self, message: str = "The server encountered an unexpected error.") -> None:
        super().__init__(status_code=500, error_code="INTERNAL_SERVER_ERROR", message=message)
