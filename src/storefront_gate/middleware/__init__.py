"""ASGI middleware for the Storefront Gate service."""

from .auth import RequestAuthMiddleware

__all__ = ["RequestAuthMiddleware"]
