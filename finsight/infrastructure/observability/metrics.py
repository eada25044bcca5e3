"""Prometheus metrics for monitoring ingestion, fraud scoring and subscription detection"""

from prometheus_client import Counter, Histogram

# Ingestion metrics
transactions_ingested_counter = Counter(
    "finsight_transactions_ingested_total",
    "Transactions accepted by the ingestion pipeline",
    ["status"],  # completed | flagged
)

fraud_score_histogram = Histogram(
    "finsight_fraud_score",
    "Distribution of computed fraud scores",
    buckets=[0, 20, 25, 30, 40, 50, 70, 80, 100],
)

# Alert metrics
fraud_alerts_counter = Counter(
    "finsight_fraud_alerts_total",
    "Fraud alerts created",
    ["severity"],
)

alert_persist_failures_counter = Counter(
    "finsight_alert_persist_failures_total",
    "Fraud alerts that could not be stored",
)

# Subscription metrics
subscriptions_detected_counter = Counter(
    "finsight_subscriptions_detected_total",
    "Subscriptions emitted by detection runs",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_ingestion(fraud_score: float, flagged: bool) -> None:
    """Record ingestion outcome and score distribution"""
    transactions_ingested_counter.labels(status="flagged" if flagged else "completed").inc()
    fraud_score_histogram.observe(fraud_score)
