from prometheus_client import Counter, Histogram


DB_QUERY_TOTAL = Counter(
    "jobly_db_query_total",
    "Statements executed through DbSession.query",
    ["table", "op_type", "status"],
)

DB_QUERY_LATENCY_SECONDS = Histogram(
    "jobly_db_query_latency_seconds",
    "Latency of statements executed through DbSession.query",
    ["table", "op_type"],
)
