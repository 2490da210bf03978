# src/storefront_gate/api/v1/endpoints/__init__.py
"""API endpoint modules for version 1."""

from .blocked_ips import router as blocked_ips_router
from .session import router as session_router
from .system import router as system_router

__all__ = [
    "blocked_ips_router",
    "session_router",
    "system_router",
]
