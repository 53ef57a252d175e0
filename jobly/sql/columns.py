from __future__ import annotations

import re
from types import MappingProxyType
from typing import Callable, Collection, Mapping

from ..errors import InvalidFieldError


ColumnResolver = Callable[[str], str]

_IDENTIFIER_RE = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")

# PostgreSQL truncates identifiers longer than NAMEDATALEN - 1
_MAX_IDENTIFIER_LENGTH = 63


def validate_identifier(name: str, identifier_type: str = "identifier") -> str:
    """
    Validate that an identifier (table/column name) is safe for SQL interpolation.

    PostgreSQL accepts far more inside quoted identifiers, but we restrict to
    alphanumeric + underscore so a quoted name can never close its quotes.

    ⚠️ SECURITY CONTRACT ⚠️
    Column names still end up in SQL text. Field names coming from request
    bodies MUST be restricted to a known set before they reach a builder;
    this check only rejects names that could break out of the quoting.

    Args:
        name: The identifier to validate
        identifier_type: Description of the identifier (for error messages)

    Returns:
        The validated identifier (unchanged if valid)

    Raises:
        TypeError: If identifier is not a string
        InvalidFieldError: If identifier contains unsafe characters or is invalid

    Example:
        >>> validate_identifier("num_employees", "column")
        'num_employees'
        >>> validate_identifier('x"=1; DROP TABLE jobs--', "column")
        InvalidFieldError: Invalid column 'x"=1; DROP TABLE jobs--': ...
    """
    if not isinstance(name, str):
        raise TypeError(f"{identifier_type} must be a string, got {type(name).__name__}")

    if not name:
        raise InvalidFieldError(f"{identifier_type} cannot be empty")

    if not _IDENTIFIER_RE.match(name):
        raise InvalidFieldError(
            f"Invalid {identifier_type} {name!r}: "
            "must start with letter/underscore and contain only alphanumeric characters and underscores"
        )

    if len(name) > _MAX_IDENTIFIER_LENGTH:
        raise InvalidFieldError(
            f"{identifier_type} {name!r} exceeds PostgreSQL's {_MAX_IDENTIFIER_LENGTH}-character limit"
        )

    return name


def column_resolver(column_map: Mapping[str, str]) -> ColumnResolver:
    """
    Build a resolver translating external field names to column names.

    Names missing from ``column_map`` resolve to themselves. The map is
    copied, so later changes to the caller's dict have no effect.

        >>> resolve = column_resolver({"numEmployees": "num_employees"})
        >>> resolve("numEmployees"), resolve("name")
        ('num_employees', 'name')
    """
    frozen = MappingProxyType(dict(column_map))

    def resolve(field_name: str) -> str:
        return frozen.get(field_name, field_name)

    return resolve


def restrict_fields(
    data: Mapping[str, object],
    allowed: Collection[str],
    entity: str,
) -> None:
    """
    Reject any field name outside ``allowed`` before it can reach a resolver.

    Raises:
        InvalidFieldError: Naming every disallowed field, in input order
    """
    rejected = [name for name in data if name not in allowed]
    if rejected:
        raise InvalidFieldError(
            f"Cannot update {entity} field(s): {', '.join(map(str, rejected))}"
        )
