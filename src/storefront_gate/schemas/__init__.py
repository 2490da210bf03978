"""Pydantic schemas for the Storefront Gate API."""

from .blocked_ip import BlockedIpResponse
from .session import AuthenticatedUser, SessionContextResponse, SessionDescriptor

__all__ = [
    "AuthenticatedUser",
    "BlockedIpResponse",
    "SessionContextResponse",
    "SessionDescriptor",
]
