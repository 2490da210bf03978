# src/storefront_gate/api/v1/__init__.py
"""Version 1 API endpoints."""

from .endpoints import blocked_ips_router, session_router, system_router

__all__ = [
    "blocked_ips_router",
    "session_router",
    "system_router",
]
