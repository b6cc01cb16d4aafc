"""Sink that upserts a run's notices into the notice store."""

from app.logging import get_logger
from app.persistence.database import get_session
from app.persistence.repositories import NoticeRepository
from app.pipeline.models import PipelineRunResult

from .base import NoticeSink

logger = get_logger(__name__, component="sink")


class DatabaseSink(NoticeSink):
    """Upserts every notice by id in a single transaction.

    init_database() must have been called before the first write.
    """

    name = "database"

    def write(self, result: PipelineRunResult) -> None:
        with get_session() as session:
            inserted = NoticeRepository(session).bulk_upsert(result.notices)

        logger.info(
            f"Stored {len(result.notices)} notice(s) ({inserted} new)",
            extra={
                "event": "sink.database.written",
                "notice_count": len(result.notices),
                "inserted": inserted,
                "updated": len(result.notices) - inserted,
            },
        )
