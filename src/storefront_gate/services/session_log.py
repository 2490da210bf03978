"""Durable, insert-only log of validated session descriptors."""

from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from storefront_gate.core.errors import SessionLogError
from storefront_gate.models import SessionRecord
from storefront_gate.schemas.session import SessionDescriptor

logger = logging.getLogger(__name__)


class SessionLogService:
    """Append validated descriptors to the `sessions` table.

    `session_point` is unique, so the insert doubles as a check that a
    descriptor is not reused. Any failure is surfaced to the caller.
    """

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    def insert(self, descriptor: SessionDescriptor) -> SessionRecord:
        """Persist one descriptor.

        Raises:
            SessionLogError: On a duplicate `session_point` or any database error.
        """
        record = SessionRecord(
            session_id=descriptor.session_id,
            session_point=descriptor.session_point,
            user_agent=descriptor.user_agent,
            language=descriptor.language,
            platform=descriptor.platform,
            screen_resolution=descriptor.screen_resolution,
            timezone_offset=descriptor.timezone_offset,
            generated_at=descriptor.generated_at,
            last_access=descriptor.last_access or descriptor.generated_at,
        )
        db = self._session_factory()
        try:
            db.add(record)
            db.commit()
            db.refresh(record)
            return record
        except IntegrityError as err:
            db.rollback()
            logger.error(
                "Session point %s already recorded: %s", descriptor.session_point, err.orig
            )
            raise SessionLogError() from err
        except SQLAlchemyError as err:
            db.rollback()
            logger.error("Failed storing session info: %s", err, exc_info=True)
            raise SessionLogError() from err
        finally:
            db.close()
