# src/storefront_gate/api/v1/endpoints/blocked_ips.py
"""Read access to the rate limiter's block audit trail."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Query

from storefront_gate.api.v1.dependencies import SessionDep
from storefront_gate.schemas.blocked_ip import BlockedIpResponse
from storefront_gate.services.block_audit import list_blocked_ips

router = APIRouter(prefix="/blocked-ips", tags=["security"])


@router.get("", response_model=list[BlockedIpResponse])
async def get_blocked_ips(
    db: SessionDep,
    limit: Annotated[int, Query(ge=1, le=1000)] = 100,
) -> list[BlockedIpResponse]:
    """List recorded block events, newest first.

    Args:
        db: Database session
        limit: Maximum number of rows to return

    Returns:
        Blocked address records ordered by creation time, most recent first
    """
    rows = list_blocked_ips(db, limit=limit)
    return [BlockedIpResponse.model_validate(row) for row in rows]
