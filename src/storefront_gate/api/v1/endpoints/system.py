# src/storefront_gate/api/v1/endpoints/system.py
"""System and transparency endpoints."""

from __future__ import annotations

import time

from fastapi import APIRouter
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from storefront_gate.api.v1.dependencies import SessionDep
from storefront_gate.core.settings import settings

router = APIRouter(prefix="/system", tags=["system"])


@router.get("/config")
async def get_public_config() -> dict[str, object]:
    """Return a sanitized snapshot of public runtime configuration.

    Excludes secrets and connection strings.

    Returns:
        Dictionary with app metadata, rate limit and session freshness settings
    """
    return {
        "app": {
            "name": settings.app_name,
            "version": settings.app_version,
            "debug": settings.debug,
        },
        "rate_limit": {
            "backend": settings.rate_limit_backend,
            "requests": settings.rate_limit_requests,
            "window_ms": settings.rate_limit_window_ms,
            "base_block_ms": settings.rate_limit_block_ms,
        },
        "session": {
            "max_age_ms": settings.session_token_max_age_ms,
        },
        "auth": {
            "token_secret_configured": bool(settings.user_token_secret),
        },
    }


@router.get("/health")
async def get_system_health(db: SessionDep) -> dict[str, object]:
    """Health check including database connectivity.

    Args:
        db: Database session

    Returns:
        Dictionary with overall status, component health and version
    """
    try:
        db.execute(text("SELECT 1"))
        db_status = "healthy"
    except SQLAlchemyError as e:
        db_status = f"unhealthy: {e}"

    return {
        "status": "healthy" if db_status == "healthy" else "unhealthy",
        "timestamp": int(time.time()),
        "components": {
            "database": db_status,
        },
        "version": settings.app_version,
    }
