from ..metrics.registry import DB_QUERY_LATENCY_SECONDS, DB_QUERY_TOTAL


def observe_db_query(table: str, op_type: str, status: str, latency_s: float) -> None:
    """
    Record one executed statement.

    Args:
        table: Table the statement targets
        op_type: "insert", "update", "select", "delete" or "count"
        status: "success" or "error"
        latency_s: Execution time in seconds
    """
    DB_QUERY_TOTAL.labels(table=table, op_type=op_type, status=status).inc()
    DB_QUERY_LATENCY_SECONDS.labels(table=table, op_type=op_type).observe(latency_s)
