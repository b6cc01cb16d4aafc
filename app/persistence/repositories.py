"""Data access layer for stored notices.

Repositories encapsulate database operations and return domain models
rather than ORM models.
"""

from typing import Iterable, List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.domain.models import NormalizedNotice
from app.logging import get_logger

from .exceptions import DataIntegrityError, PersistenceError
from .schema import NoticeModel

logger = get_logger(__name__, component="database")


class NoticeRepository:
    """Repository for notice-related database operations."""

    def __init__(self, session: Session):
        """Initialize repository with database session.

        Args:
            session: SQLAlchemy session for database operations
        """
        self.session = session

    def get_by_id(self, notice_id: str) -> Optional[NormalizedNotice]:
        """Retrieve a notice by identity hash.

        Returns:
            NormalizedNotice if found, None otherwise

        Raises:
            PersistenceError: If database error occurs
        """
        try:
            model = self.session.get(NoticeModel, notice_id)
            return model.to_domain() if model is not None else None
        except SQLAlchemyError as e:
            logger.error(
                f"Error retrieving notice {notice_id}: {e}",
                exc_info=True,
                extra={"event": "persistence.notice.get_failed", "notice_id": notice_id},
            )
            raise PersistenceError(f"Failed to retrieve notice: {e}") from e

    def list_by_state(self, state: str) -> List[NormalizedNotice]:
        """All stored notices for a jurisdiction, highest score first.

        Raises:
            PersistenceError: If database error occurs
        """
        try:
            stmt = (
                select(NoticeModel)
                .where(NoticeModel.state == state.upper())
                .order_by(NoticeModel.nursing_score.desc(), NoticeModel.notice_date.desc())
            )
            return [model.to_domain() for model in self.session.execute(stmt).scalars().all()]
        except SQLAlchemyError as e:
            logger.error(
                f"Error listing notices for {state}: {e}",
                exc_info=True,
                extra={"event": "persistence.notice.list_failed", "state": state},
            )
            raise PersistenceError(f"Failed to list notices: {e}") from e

    def count(self) -> int:
        """Number of stored notices."""
        try:
            return self.session.execute(select(func.count()).select_from(NoticeModel)).scalar_one()
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to count notices: {e}") from e

    def upsert(self, notice: NormalizedNotice) -> bool:
        """Insert a new notice or overwrite the stored row with the same id.

        Returns:
            True if the notice was inserted, False if an existing row was updated

        Raises:
            DataIntegrityError: If a constraint is violated
            PersistenceError: If another database error occurs
        """
        try:
            existing = self.session.get(NoticeModel, notice.id)
            if existing is not None:
                existing.apply(notice)
                self.session.flush()
                return False

            self.session.add(NoticeModel.from_domain(notice))
            self.session.flush()
            return True

        except IntegrityError as e:
            logger.error(
                f"Integrity error upserting notice {notice.id}: {e}",
                exc_info=True,
                extra={"event": "persistence.notice.integrity_error", "notice_id": notice.id},
            )
            raise DataIntegrityError(f"Failed to upsert notice due to constraint violation: {e}") from e
        except SQLAlchemyError as e:
            logger.error(
                f"Error upserting notice {notice.id}: {e}",
                exc_info=True,
                extra={"event": "persistence.notice.upsert_failed", "notice_id": notice.id},
            )
            raise PersistenceError(f"Failed to upsert notice: {e}") from e

    def bulk_upsert(self, notices: Iterable[NormalizedNotice]) -> int:
        """Upsert many notices in the current transaction.

        Returns:
            Number of newly inserted notices
        """
        inserted = 0
        for notice in notices:
            if self.upsert(notice):
                inserted += 1
        return inserted
