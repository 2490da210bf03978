# src/storefront_gate/models/blocked_ip.py
"""Audit trail of source addresses blocked by the rate limiter."""

from datetime import datetime

from sqlalchemy import DateTime, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from storefront_gate.db.session import Base
from storefront_gate.db.time import utcnow


class BlockedIp(Base):
    """Record written each time an address exceeds the request limit.

    Rows are append-only; nothing in the request path updates or deletes them.
    """

    __tablename__ = "blocked_ips"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    ip: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    route: Mapped[str] = mapped_column(Text, nullable=False)
    block_start: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    block_end: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    request_count: Mapped[int] = mapped_column(Integer, nullable=False)
    first_request: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    last_request: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
