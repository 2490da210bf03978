"""Schemas for the blocked address audit trail."""
from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class BlockedIpResponse(BaseModel):
    """A single block event recorded by the rate limiter."""

    id: int
    ip: str
    route: str
    block_start: datetime
    block_end: datetime
    request_count: int
    first_request: datetime
    last_request: datetime
    created_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)
