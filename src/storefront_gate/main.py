# src/storefront_gate/main.py
"""Main entry point for the Storefront Gate application."""

from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from storefront_gate.api.v1 import blocked_ips_router, session_router, system_router
from storefront_gate.core.settings import settings
from storefront_gate.db.session import SessionLocal
from storefront_gate.middleware import RequestAuthMiddleware
from storefront_gate.services.authenticator import RequestAuthenticator, build_authenticator

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="Storefront Gate",
    description="Request authentication, session freshness and rate limiting for the storefront API",
    version=settings.app_version,
)

app.state.authenticator = build_authenticator(SessionLocal)

# Authentication runs inside CORS so rejected requests still carry CORS headers
app.add_middleware(RequestAuthMiddleware)

# Add GZip middleware for compression
app.add_middleware(GZipMiddleware)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.effective_cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

# Include API routers
app.include_router(session_router, prefix="/api/v1")
app.include_router(blocked_ips_router, prefix="/api/v1")
app.include_router(system_router, prefix="/api/v1")


@app.on_event("startup")
async def on_startup() -> None:
    if not settings.user_token_secret:
        logger.warning("USER_TOKEN_SECRET is not set; logged-in requests will fail with 500")
    logger.info(
        "Rate limiting with %s backend: %d requests per %d ms",
        settings.rate_limit_backend,
        settings.rate_limit_requests,
        settings.rate_limit_window_ms,
    )


@app.on_event("shutdown")
async def on_shutdown() -> None:
    authenticator: RequestAuthenticator = app.state.authenticator
    await authenticator.block_audit.drain()


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint to verify the service is running."""
    return {"status": "ok"}


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with basic information about the API."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "docs": "/docs",
        "redoc": "/redoc",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("storefront_gate.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
