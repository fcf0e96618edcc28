"""Prometheus metrics definitions."""

from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST

http_request_duration = Histogram(
    "http_request_duration_seconds",
    "Duration of HTTP requests in seconds",
    labelnames=["method", "endpoint", "status_code"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)

http_requests_total = Counter(
    "http_requests_total",
    "Total number of HTTP requests",
    labelnames=["method", "endpoint", "status_code"],
)

error_counter = Counter(
    "app_errors_total",
    "Total application errors",
    labelnames=["error_kind"],
)

analytics_records_scanned = Histogram(
    "analytics_records_scanned",
    "Number of problem records aggregated per analytics request",
    labelnames=["view"],
    buckets=(0, 10, 100, 500, 1000, 2500, 5000, 10000),
)

analytics_truncated_total = Counter(
    "analytics_truncated_total",
    "Analytics requests whose matching records exceeded the bulk ceiling",
    labelnames=["view"],
)


def get_metrics() -> tuple[bytes, str]:
    return generate_latest(), CONTENT_TYPE_LATEST
