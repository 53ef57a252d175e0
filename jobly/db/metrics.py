from __future__ import annotations

from ..metrics.registry import DB_QUERY_LATENCY_SECONDS, DB_QUERY_TOTAL


def observe_db_query(table: str, op_type: str, status: str, latency_s: float) -> None:
    """
    Record one executed statement.

    Args:
        table: Table the statement targets ("unknown" if it could not be parsed)
        op_type: insert / update / delete / select / unknown
        status: "success" or "error"
        latency_s: Wall-clock execution time in seconds
    """
    DB_QUERY_TOTAL.labels(table=table, op_type=op_type, status=status).inc()
    DB_QUERY_LATENCY_SECONDS.labels(table=table, op_type=op_type).observe(latency_s)
