from .columns import ColumnResolver, column_resolver, restrict_fields, validate_identifier
from .filters import company_filters_sql, job_filters_sql
from .fragment import SetFragment, SqlFragment, WhereFragment
from .partial_update import sql_for_partial_update

__all__ = [
    "ColumnResolver",
    "SetFragment",
    "SqlFragment",
    "WhereFragment",
    "column_resolver",
    "company_filters_sql",
    "job_filters_sql",
    "restrict_fields",
    "sql_for_partial_update",
    "validate_identifier",
]
