from __future__ import annotations

from typing import Any, Mapping, Optional

from ..errors import InvalidRangeError
from .fragment import WhereFragment


def _present(criteria: Mapping[str, Any], key: str) -> bool:
    return criteria.get(key) is not None


def _contains_pattern(text: Any) -> str:
    """
    ILIKE pattern matching ``text`` literally anywhere in the column.

        >>> _contains_pattern("100%_off")
        '%100\\\\%\\\\_off%'
    """
    escaped = str(text).replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def company_filters_sql(
    criteria: Optional[Mapping[str, Any]] = None,
    start: int = 1,
) -> WhereFragment:
    """
    Build the WHERE fragment for a company search.

    Criteria (all optional):
    - name: case-insensitive partial match
    - minEmployees / maxEmployees: inclusive bounds on num_employees

    Clause order is always name, min, max, whichever are present.

    Raises:
        InvalidRangeError: If both bounds are given and minEmployees > maxEmployees
    """
    criteria = criteria or {}

    min_employees = int(criteria["minEmployees"]) if _present(criteria, "minEmployees") else None
    max_employees = int(criteria["maxEmployees"]) if _present(criteria, "maxEmployees") else None

    if min_employees is not None and max_employees is not None and min_employees > max_employees:
        raise InvalidRangeError("minEmployees cannot be greater than maxEmployees")

    fragment = WhereFragment(start=start)
    if _present(criteria, "name"):
        fragment = fragment.add("name ILIKE {} ESCAPE '\\'", _contains_pattern(criteria["name"]))
    if min_employees is not None:
        fragment = fragment.add("num_employees >= {}", min_employees)
    if max_employees is not None:
        fragment = fragment.add("num_employees <= {}", max_employees)
    return fragment


def job_filters_sql(
    criteria: Optional[Mapping[str, Any]] = None,
    start: int = 1,
) -> WhereFragment:
    """
    Build the WHERE fragment for a job search.

    Criteria (all optional):
    - title: case-insensitive partial match
    - minSalary: inclusive lower bound on salary
    - hasEquity: only the boolean True filters to equity > 0; False, a
      missing key, or any non-boolean value adds nothing
    """
    criteria = criteria or {}

    fragment = WhereFragment(start=start)
    if _present(criteria, "title"):
        fragment = fragment.add("title ILIKE {} ESCAPE '\\'", _contains_pattern(criteria["title"]))
    if _present(criteria, "minSalary"):
        fragment = fragment.add("salary >= {}", int(criteria["minSalary"]))
    if criteria.get("hasEquity") is True:
        fragment = fragment.add_literal("equity > 0")
    return fragment
