from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any


@dataclass(frozen=True)
class SqlFragment:
    """
    Parameterized SQL text pieces plus the parameters they reference.

    Placeholders are PostgreSQL-style ``$n``. ``start`` is the index of the
    first placeholder this fragment may allocate, so a fragment can be
    appended after parameters already used by the surrounding statement.

    Fragments are immutable: ``add`` returns a new fragment whose
    placeholder index is derived from the accumulated parameter count.

    Example:
        >>> frag = WhereFragment(start=3).add("name ILIKE {}", "%net%")
        >>> frag.clauses, frag.params
        (('name ILIKE $3',), ('%net%',))
    """

    clauses: tuple[str, ...] = ()
    params: tuple[Any, ...] = ()
    start: int = 1

    def __post_init__(self) -> None:
        if self.start < 1:
            raise ValueError(f"placeholder indices start at 1, got {self.start}")

    @property
    def next_index(self) -> int:
        """Index of the next free ``$n`` placeholder."""
        return self.start + len(self.params)

    def add(self, template: str, value: Any) -> "SqlFragment":
        """
        Append a clause that binds one parameter.

        ``template`` holds a single ``{}`` which is replaced by the
        placeholder; the value itself only goes into ``params``.
        """
        clause = template.format(f"${self.next_index}")
        return replace(
            self,
            clauses=self.clauses + (clause,),
            params=self.params + (value,),
        )

    def add_literal(self, clause: str) -> "SqlFragment":
        """Append a clause that binds no parameter."""
        return replace(self, clauses=self.clauses + (clause,))

    def join(self, sep: str) -> str:
        return sep.join(self.clauses)

    def __bool__(self) -> bool:
        return bool(self.clauses)


@dataclass(frozen=True)
class SetFragment(SqlFragment):
    """``SET`` column assignments of a partial update."""

    @property
    def set_cols(self) -> str:
        return self.join(", ")

    @property
    def values(self) -> list[Any]:
        return list(self.params)


@dataclass(frozen=True)
class WhereFragment(SqlFragment):
    """Predicates joined by ``AND``."""

    @property
    def where_sql(self) -> str:
        """
        `` WHERE ...`` ready to append to a statement, or ``""`` with no clauses.
        """
        if not self.clauses:
            return ""
        return " WHERE " + self.join(" AND ")
