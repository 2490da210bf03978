# src/storefront_gate/models/__init__.py
"""SQLAlchemy models for the Storefront Gate service."""

from .blocked_ip import BlockedIp
from .session_record import SessionRecord

__all__ = [
    "BlockedIp",
    "SessionRecord",
]
