from prometheus_client import Counter, Histogram

DB_QUERY_TOTAL = Counter(
    "entitydao_db_query_total",
    "Number of statements executed through DbQuery",
    ["table", "op_type", "status"],
)

DB_QUERY_LATENCY_SECONDS = Histogram(
    "entitydao_db_query_latency_seconds",
    "Statement execution latency in seconds",
    ["table", "op_type"],
)
