"""Authentication and rate limiting middleware."""

from __future__ import annotations

import logging

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import JSONResponse

from storefront_gate.core.errors import AuthError, RateLimitedError
from storefront_gate.core.settings import settings
from storefront_gate.services.authenticator import RequestAuthenticator, is_websocket_upgrade

logger = logging.getLogger(__name__)


def client_address(request: Request) -> str:
    """Extract the client address, preferring the first X-Forwarded-For hop."""
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


def request_route(request: Request) -> str:
    """Return the requested path including its query string."""
    query = request.url.query
    return f"{request.url.path}?{query}" if query else request.url.path


class RequestAuthMiddleware(BaseHTTPMiddleware):
    """Gate every HTTP request on rate limits, session freshness and auth headers.

    The authenticator is read from `app.state.authenticator` on each request so
    it can be swapped at runtime. Accepted requests get `request.state.session`,
    `request.state.user` and `request.state.public_token`.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if is_websocket_upgrade(request.headers) or request.url.path in settings.auth_exempt_paths:
            return await call_next(request)

        authenticator: RequestAuthenticator = request.app.state.authenticator
        try:
            context = await authenticator.authenticate(
                request.headers,
                source_address=client_address(request),
                route=request_route(request),
            )
        except AuthError as exc:
            logger.info(
                "Rejected %s %s with %d: %s",
                request.method,
                request.url.path,
                exc.status_code,
                exc.message,
            )
            headers = None
            if isinstance(exc, RateLimitedError):
                headers = {"Retry-After": str(exc.retry_after_seconds)}
            return JSONResponse(
                {"error": exc.message},
                status_code=exc.status_code,
                headers=headers,
            )

        request.state.session = context.session
        request.state.user = context.user
        request.state.public_token = context.public_token
        return await call_next(request)
