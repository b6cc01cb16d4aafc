"""Persistence layer exceptions.

All persistence exceptions inherit from PersistenceError so callers can catch
every database failure with one clause.
"""


class PersistenceError(Exception):
    """Base exception for notice store errors."""

    pass


class DatabaseConnectionError(PersistenceError):
    """Raised when the notice store cannot be reached or initialized.

    Examples:
    - Empty or malformed DATABASE_URL
    - Database file not writable
    - Store used before init_database()
    """

    pass


class DataIntegrityError(PersistenceError):
    """Raised when a write violates a table constraint (e.g. a NULL employer)."""

    pass
