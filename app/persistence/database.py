"""Engine and session lifecycle for the notice store."""

from contextlib import contextmanager
from pathlib import Path
from typing import Generator

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import ArgumentError
from sqlalchemy.orm import Session, sessionmaker

from app.logging import get_logger

from .exceptions import DatabaseConnectionError

_engine: Engine | None = None
_session_factory: sessionmaker | None = None

logger = get_logger(__name__, component="database")


def init_database(database_url: str) -> None:
    """Create the engine, verify the connection and create missing tables.

    Call once at startup, before any sink writes.

    Args:
        database_url: SQLAlchemy URL, e.g. "sqlite:///./data/warn_notices.db"

    Raises:
        DatabaseConnectionError: If the URL is invalid or the store is unreachable
    """
    global _engine, _session_factory

    if not database_url or not isinstance(database_url, str):
        raise DatabaseConnectionError("Database URL must be a non-empty string")

    try:
        url = make_url(database_url)
    except ArgumentError as e:
        raise DatabaseConnectionError(f"Invalid database URL: {e}") from e

    logger.info(
        "Initializing notice store",
        extra={"event": "database.initializing", "database_url": _redact_url(database_url)},
    )

    is_sqlite = url.get_backend_name() == "sqlite"
    if is_sqlite and url.database and url.database != ":memory:":
        Path(url.database).parent.mkdir(parents=True, exist_ok=True)

    try:
        engine = create_engine(
            database_url,
            pool_pre_ping=True,
            connect_args={"check_same_thread": False, "timeout": 30} if is_sqlite else {},
        )
        if is_sqlite:
            _configure_sqlite(engine)
        _validate_connection(engine)

        from .schema import create_schema

        create_schema(engine)
    except DatabaseConnectionError:
        raise
    except Exception as e:
        error_msg = f"Failed to initialize database: {e}"
        logger.error(error_msg, exc_info=True, extra={"event": "database.init.failed"})
        raise DatabaseConnectionError(error_msg) from e

    _engine = engine
    _session_factory = sessionmaker(bind=engine, autoflush=True, expire_on_commit=False)
    logger.info(
        "Notice store initialized",
        extra={"event": "database.initialised", "database_url": _redact_url(database_url)},
    )


def _configure_sqlite(engine: Engine) -> None:
    @event.listens_for(engine, "connect")
    def set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()


def _validate_connection(engine: Engine) -> None:
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1")).fetchone()
    except Exception as e:
        raise DatabaseConnectionError(f"Failed to validate database connection: {e}") from e


def _redact_url(url: str) -> str:
    """Hide the password of a server URL; SQLite URLs are returned unchanged."""
    try:
        return make_url(url).render_as_string(hide_password=True)
    except ArgumentError:
        return url


@contextmanager
def get_session() -> Generator[Session, None, None]:
    """Yield a session that commits on success and rolls back on error.

    Raises:
        DatabaseConnectionError: If init_database() has not been called

    Example:
        >>> with get_session() as session:
        ...     NoticeRepository(session).upsert(notice)
    """
    if _session_factory is None:
        raise DatabaseConnectionError(
            "Database not initialized. Call init_database() before using get_session()"
        )

    session = _session_factory()
    try:
        yield session
        session.commit()
    except Exception as e:
        session.rollback()
        logger.warning(
            f"Database session rolled back: {e}",
            extra={"event": "database.session.rolled_back", "error_type": type(e).__name__},
        )
        raise
    finally:
        session.close()


def get_engine() -> Engine:
    """Return the active engine.

    Raises:
        DatabaseConnectionError: If init_database() has not been called
    """
    if _engine is None:
        raise DatabaseConnectionError(
            "Database not initialized. Call init_database() before using get_engine()"
        )
    return _engine


def close_database() -> None:
    """Dispose of the engine; safe to call when nothing is open."""
    global _engine, _session_factory

    if _engine is not None:
        _engine.dispose()
        _engine = None
        _session_factory = None
        logger.info("Notice store closed", extra={"event": "database.closed"})
