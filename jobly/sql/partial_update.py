from __future__ import annotations

from typing import Any, Mapping, Union

from ..errors import EmptyUpdateError
from .columns import ColumnResolver, column_resolver, validate_identifier
from .fragment import SetFragment


def sql_for_partial_update(
    data_to_update: Mapping[str, Any],
    js_to_sql: Union[Mapping[str, str], ColumnResolver],
    start: int = 1,
) -> SetFragment:
    """
    Build the ``SET`` part of a partial UPDATE.

    Clauses and values follow the key order of ``data_to_update``; clause i
    is ``"<column>"=$<start + i>`` and ``values[i]`` is its value. Values are
    only ever bound as parameters.

    Args:
        data_to_update: external field name -> new value (must not be empty)
        js_to_sql: mapping or resolver from external field name to column
                   name; unmapped names are used unchanged
        start: index of the first placeholder

    Returns:
        SetFragment with ``set_cols`` / ``values``

    Raises:
        EmptyUpdateError: If data_to_update is empty
        InvalidFieldError: If a resolved column is not a safe identifier

    Example:
        >>> frag = sql_for_partial_update(
        ...     {"firstName": "Aliya", "age": 32}, {"firstName": "first_name"}
        ... )
        >>> frag.set_cols, frag.values
        ('"first_name"=$1, "age"=$2', ['Aliya', 32])
    """
    if not data_to_update:
        raise EmptyUpdateError("No data")

    resolve = js_to_sql if callable(js_to_sql) else column_resolver(js_to_sql)

    fragment = SetFragment(start=start)
    for field_name, value in data_to_update.items():
        column = validate_identifier(resolve(field_name), "column")
        fragment = fragment.add(f'"{column}"={{}}', value)
    return fragment
