from .schema import drop_schema, init_schema
from .session import DbSession, QueryExecutor

__all__ = [
    "DbSession",
    "QueryExecutor",
    "drop_schema",
    "init_schema",
]
