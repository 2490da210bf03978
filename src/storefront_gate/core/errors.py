# src/storefront_gate/core/errors.py
"""Exceptions raised while authenticating inbound requests.

Each failure carries the HTTP status it maps to and the message returned to
clients. Only the authentication middleware turns them into responses.
"""

from __future__ import annotations

from enum import StrEnum


class AuthError(RuntimeError):
    """Base exception for request authentication failures."""

    status_code: int = 500

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class SessionTokenReason(StrEnum):
    """Why a session descriptor header was rejected."""

    MISSING = "missing_token"
    MALFORMED = "malformed_token"
    INCOMPLETE = "incomplete_token"
    EXPIRED = "expired_token"


_SESSION_TOKEN_FAILURES: dict[SessionTokenReason, tuple[int, str]] = {
    SessionTokenReason.MISSING: (401, "Unauthorized Request: Missing session token (ts)"),
    SessionTokenReason.MALFORMED: (400, "Invalid session token format"),
    SessionTokenReason.INCOMPLETE: (
        400,
        "Invalid session token: Missing required session details",
    ),
    SessionTokenReason.EXPIRED: (403, "Session token expired"),
}


class SessionTokenError(AuthError):
    """Raised when the `ts` session descriptor header is unusable."""

    def __init__(self, reason: SessionTokenReason) -> None:
        status_code, message = _SESSION_TOKEN_FAILURES[reason]
        super().__init__(message, status_code=status_code)
        self.reason = reason


class PublicTokenReason(StrEnum):
    """Why a public auth token failed to decode."""

    TOO_SHORT = "too_short"
    BAD_ENCODING = "bad_encoding"
    BAD_STRUCTURE = "bad_structure"


_PUBLIC_TOKEN_FAILURES: dict[PublicTokenReason, tuple[int, str]] = {
    PublicTokenReason.TOO_SHORT: (401, "Invalid token length"),
    PublicTokenReason.BAD_ENCODING: (401, "Invalid token encoding"),
    PublicTokenReason.BAD_STRUCTURE: (403, "Invalid token structure"),
}


class PublicTokenError(AuthError):
    """Raised when a bearer token cannot be decoded against the shared secret."""

    def __init__(self, reason: PublicTokenReason) -> None:
        status_code, message = _PUBLIC_TOKEN_FAILURES[reason]
        super().__init__(message, status_code=status_code)
        self.reason = reason


class ConfigurationError(AuthError):
    """Raised when the shared token secret is not configured."""

    def __init__(self, message: str = "Server configuration error: Secret missing") -> None:
        super().__init__(message, status_code=500)


class SessionLogError(AuthError):
    """Raised when a validated session descriptor cannot be persisted."""

    def __init__(
        self,
        message: str = "Internal server error: Unable to store session info.",
    ) -> None:
        super().__init__(message, status_code=500)


class RateLimitedError(AuthError):
    """Raised when the source address is over its request limit or blocked."""

    def __init__(self, message: str, retry_after_seconds: int) -> None:
        super().__init__(message, status_code=429)
        self.retry_after_seconds = retry_after_seconds


class MissingAuthorizationError(AuthError):
    """Raised when a request carries no `authorization` header."""

    def __init__(self) -> None:
        super().__init__("Missing authentication token", status_code=401)
