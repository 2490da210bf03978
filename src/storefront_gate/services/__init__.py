# src/storefront_gate/services/__init__.py
"""Request authentication services for the Storefront Gate application."""

from .authenticator import AuthContext, RequestAuthenticator
from .block_audit import BlockAuditService
from .rate_limiter import RateLimiter
from .session_log import SessionLogService
from .session_validator import SessionTokenValidator

__all__ = [
    "AuthContext",
    "BlockAuditService",
    "RateLimiter",
    "RequestAuthenticator",
    "SessionLogService",
    "SessionTokenValidator",
]
