# src/storefront_gate/models/session_record.py
"""Durable log of validated session descriptors."""

from datetime import datetime

from sqlalchemy import BigInteger, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from storefront_gate.db.session import Base
from storefront_gate.db.time import utcnow


class SessionRecord(Base):
    """One row per validated session descriptor.

    `session_point` identifies a single tab or connection and is unique across
    the table, so replaying a descriptor fails on insert.
    """

    __tablename__ = "sessions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    session_id: Mapped[str] = mapped_column(String(128), nullable=False)
    session_point: Mapped[str] = mapped_column(String(128), nullable=False, unique=True)

    user_agent: Mapped[str | None] = mapped_column(Text, nullable=True)
    language: Mapped[str | None] = mapped_column(String(32), nullable=True)
    platform: Mapped[str | None] = mapped_column(String(64), nullable=True)
    screen_resolution: Mapped[str | None] = mapped_column(String(32), nullable=True)
    timezone_offset: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # Epoch milliseconds, as supplied by the client.
    generated_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
    last_access: Mapped[int | None] = mapped_column(BigInteger, nullable=True)

    created_at: Mapped[datetime] = mapped_column(default=utcnow)
