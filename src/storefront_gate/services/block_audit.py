"""Best-effort audit trail of rate limit blocks."""

from __future__ import annotations

import asyncio
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from storefront_gate.db.time import from_ms
from storefront_gate.models import BlockedIp
from storefront_gate.services.rate_limiter import BlockedAddress

logger = logging.getLogger(__name__)


class BlockAuditService:
    """Write block events to the `blocked_ips` table without holding up requests.

    Writes run on a worker thread in a background task. Failures are logged
    and never reach the request that triggered the block.
    """

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory
        self._pending: set[asyncio.Task[None]] = set()

    def write(self, event: BlockedAddress) -> bool:
        """Insert one audit row synchronously. Returns False if the write failed."""
        db = self._session_factory()
        try:
            db.add(
                BlockedIp(
                    ip=event.address,
                    route=event.route,
                    block_start=from_ms(event.block_start),
                    block_end=from_ms(event.block_end),
                    request_count=event.request_count,
                    first_request=from_ms(event.first_request),
                    last_request=from_ms(event.last_request),
                )
            )
            db.commit()
            return True
        except SQLAlchemyError as err:
            db.rollback()
            logger.error(
                "Error storing blocked IP info for %s: %s", event.address, err, exc_info=True
            )
            return False
        finally:
            db.close()

    def record(self, event: BlockedAddress) -> asyncio.Task[None]:
        """Schedule `event` to be written in the background."""
        task = asyncio.create_task(self._write_async(event))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def _write_async(self, event: BlockedAddress) -> None:
        try:
            await asyncio.to_thread(self.write, event)
        except Exception:  # noqa: BLE001 - audit writes must never fail a request
            logger.exception("Exception recording blocked IP %s", event.address)

    async def drain(self) -> None:
        """Wait for every scheduled write to finish."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)


def list_blocked_ips(db: Session, limit: int = 100) -> list[BlockedIp]:
    """Return the most recent block events, newest first."""
    return (
        db.query(BlockedIp)
        .order_by(BlockedIp.created_at.desc(), BlockedIp.id.desc())
        .limit(limit)
        .all()
    )
