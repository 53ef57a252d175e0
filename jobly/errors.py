from typing import Optional


class JoblyError(Exception):
    """Base exception for jobly errors."""

    status_code = 500


class EmptyUpdateError(JoblyError):
    """An update was requested with no fields to change."""

    status_code = 400


class InvalidRangeError(JoblyError):
    """A minimum filter is greater than its maximum counterpart."""

    status_code = 400


class InvalidFieldError(JoblyError):
    """A field or column name is not allowed in the statement being built."""

    status_code = 400


class DuplicateError(JoblyError):
    """A row with the same natural key already exists."""

    status_code = 400


class NotFoundError(JoblyError):
    """The targeted row does not exist."""

    status_code = 404


class StorageError(JoblyError):
    """Any failure raised while executing a statement."""


class UniqueViolationError(StorageError):
    """A unique constraint rejected the statement."""

    def __init__(self, message: str, constraint: Optional[str] = None) -> None:
        super().__init__(message)
        # constraint name (PostgreSQL) or "table.column, ..." (SQLite), when known
        self.constraint = constraint


class ForeignKeyViolationError(StorageError):
    """A foreign key constraint rejected the statement."""
