from __future__ import annotations

import re
from typing import Any, Sequence

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ..errors import ForeignKeyViolationError, StorageError, UniqueViolationError


_PLACEHOLDER_RE = re.compile(r"\$(\d+)")

_OPERATION_RES = (
    ("insert", re.compile(r"^\s*INSERT\s+INTO\s+\"?(\w+)", re.IGNORECASE)),
    ("update", re.compile(r"^\s*UPDATE\s+\"?(\w+)", re.IGNORECASE)),
    ("delete", re.compile(r"^\s*DELETE\s+FROM\s+\"?(\w+)", re.IGNORECASE)),
    ("select", re.compile(r"^\s*SELECT\b.*?\bFROM\s+\"?(\w+)", re.IGNORECASE | re.DOTALL)),
)

# SQLSTATE codes, see PostgreSQL Appendix A
_UNIQUE_VIOLATION = "23505"
_FOREIGN_KEY_VIOLATION = "23503"

_PG_CONSTRAINT_RE = re.compile(r'unique constraint "([^"]+)"', re.IGNORECASE)
_SQLITE_CONSTRAINT_RE = re.compile(r"UNIQUE constraint failed: (.+)$", re.IGNORECASE | re.MULTILINE)


def bind_positional(sql: str, params: Sequence[Any] | None = None) -> tuple[str, dict[str, Any]]:
    """
    Rewrite ``$n`` placeholders into SQLAlchemy named binds.

    ``$1`` becomes ``(:p1)`` and ``params[0]`` is bound as ``p1``. The parentheses
    keep the bind name separate from a following ``::type`` cast. Every
    placeholder must have a parameter and every parameter must be referenced,
    so misaligned fragments fail here instead of silently binding the wrong
    values.

    Example:
        >>> bind_positional('UPDATE jobs SET "title"=$1 WHERE id = $2', ["Dev", 7])
        ('UPDATE jobs SET "title"=(:p1) WHERE id = (:p2)', {'p1': 'Dev', 'p2': 7})

    Raises:
        ValueError: On a placeholder without a parameter or an unused parameter
    """
    values = list(params or ())
    referenced: set[int] = set()

    def _replace(match: re.Match) -> str:
        idx = int(match.group(1))
        if idx < 1 or idx > len(values):
            raise ValueError(
                f"Placeholder ${idx} has no parameter ({len(values)} given)"
            )
        referenced.add(idx)
        return f"(:p{idx})"

    named_sql = _PLACEHOLDER_RE.sub(_replace, sql)

    unused = sorted(set(range(1, len(values) + 1)) - referenced)
    if unused:
        raise ValueError(f"Parameters not referenced by any placeholder: {unused}")

    return named_sql, {f"p{idx}": value for idx, value in enumerate(values, start=1)}


def parse_sql_operation(sql: str) -> tuple[str, str]:
    """
    Return ``(table, op_type)`` for metrics labels, ``("unknown", "unknown")``
    when the statement is not a plain INSERT/UPDATE/DELETE/SELECT.
    """
    for op_type, pattern in _OPERATION_RES:
        match = pattern.match(sql)
        if match:
            return match.group(1).lower(), op_type
    return "unknown", "unknown"


def classify_storage_error(exc: SQLAlchemyError) -> StorageError:
    """
    Map a SQLAlchemy error onto the StorageError hierarchy.

    The caller is expected to ``raise classify_storage_error(exc) from exc``
    so the driver error stays reachable through ``__cause__``.
    """
    orig = getattr(exc, "orig", None)
    error_msg = str(orig) if orig is not None else str(exc)

    if isinstance(exc, IntegrityError):
        # psycopg2 exposes pgcode, psycopg 3 exposes sqlstate
        code = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
        lowered = error_msg.lower()
        if code == _UNIQUE_VIOLATION or "duplicate key" in lowered or "unique constraint" in lowered:
            return UniqueViolationError(error_msg, constraint=_unique_constraint(orig, error_msg))
        if code == _FOREIGN_KEY_VIOLATION or "foreign key" in lowered:
            return ForeignKeyViolationError(error_msg)

    return StorageError(error_msg)


def _unique_constraint(orig: Any, error_msg: str) -> str | None:
    """
    Name of the violated unique constraint, or the "table.column" list SQLite reports.
    """
    diag = getattr(orig, "diag", None)
    name = getattr(diag, "constraint_name", None)
    if name:
        return name

    for pattern in (_PG_CONSTRAINT_RE, _SQLITE_CONSTRAINT_RE):
        match = pattern.search(error_msg)
        if match:
            return match.group(1).strip()
    return None
