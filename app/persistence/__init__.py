"""Notice store backed by SQLAlchemy.

Public API:
    - init_database(database_url) / get_session() / get_engine() / close_database()
    - NoticeRepository: upsert and lookup of notices by identity
    - PersistenceError, DatabaseConnectionError, DataIntegrityError

Example usage:
    >>> from app.persistence import init_database, get_session, NoticeRepository
    >>> init_database("sqlite:///./data/warn_notices.db")
    >>> with get_session() as session:
    ...     NoticeRepository(session).upsert(notice)
"""

from .database import close_database, get_engine, get_session, init_database
from .exceptions import DatabaseConnectionError, DataIntegrityError, PersistenceError
from .repositories import NoticeRepository
from .schema import NoticeModel

__all__ = [
    "init_database",
    "get_session",
    "close_database",
    "get_engine",
    "NoticeModel",
    "NoticeRepository",
    "PersistenceError",
    "DatabaseConnectionError",
    "DataIntegrityError",
]
