"""
Prometheus metrics for the importacoes console.
Focus on ingestion API traffic and polling health.
"""

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)

# Create a custom registry for our metrics
metrics_registry = CollectorRegistry()

# ====== BUSINESS METRICS ======

# Ingestion API calls
repository_operations_total = Counter(
    "importacao_repository_operations_total",
    "Total ingestion API operations",
    ["operation_type", "status"],  # list, create, get, reprocess + success/failed/not_found
    registry=metrics_registry,
)

# Submissions
submissions_total = Counter(
    "importacao_submissions_total",
    "Total import submissions by result",
    ["status"],  # accepted, rejected, failed
    registry=metrics_registry,
)

# Reprocess requests
reprocess_requests_total = Counter(
    "importacao_reprocess_requests_total",
    "Total reprocess requests by result",
    ["status"],  # success, failed, refused
    registry=metrics_registry,
)

# Poller ticks
poller_ticks_total = Counter(
    "importacao_poller_ticks_total",
    "Total status poller ticks",
    ["outcome"],  # success, failed
    registry=metrics_registry,
)

poller_active_gauge = Gauge(
    "importacao_poller_active",
    "1 while the status poller timer is running",
    registry=metrics_registry,
)

fingerprint_duration_seconds = Histogram(
    "importacao_fingerprint_duration_seconds",
    "Time spent hashing selected files",
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 5.0],
    registry=metrics_registry,
)

# Live updates
live_update_messages_total = Counter(
    "importacao_live_update_messages_total",
    "Total change notifications pushed by the ingestion API hub",
    registry=metrics_registry,
)

live_update_connected_gauge = Gauge(
    "importacao_live_update_connected",
    "1 while the live update connection is established",
    registry=metrics_registry,
)

# ====== GOLDEN SIGNALS ======

http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status_code"],
    registry=metrics_registry,
)

http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration",
    ["method", "endpoint"],
    buckets=[0.1, 0.5, 1.0, 2.5, 5.0, 10.0],
    registry=metrics_registry,
)

# ====== BUSINESS METRIC FUNCTIONS ======


def record_repository_operation(operation_type: str, status: str) -> None:
    """Record an ingestion API call (list, create, get, reprocess)."""
    repository_operations_total.labels(
        operation_type=operation_type, status=status
    ).inc()


def record_submission(status: str) -> None:
    submissions_total.labels(status=status).inc()


def record_reprocess(status: str) -> None:
    reprocess_requests_total.labels(status=status).inc()


def record_poller_tick(outcome: str) -> None:
    poller_ticks_total.labels(outcome=outcome).inc()


def set_poller_active(active: bool) -> None:
    poller_active_gauge.set(1 if active else 0)


def observe_fingerprint_duration(duration: float) -> None:
    fingerprint_duration_seconds.observe(duration)


def record_live_update_message() -> None:
    live_update_messages_total.inc()


def set_live_update_connected(connected: bool) -> None:
    live_update_connected_gauge.set(1 if connected else 0)


# ====== GOLDEN SIGNALS FUNCTIONS ======


def record_http_request(
    method: str, endpoint: str, status_code: int, duration: float
) -> None:
    """Record HTTP request metrics."""
    http_requests_total.labels(
        method=method, endpoint=endpoint, status_code=str(status_code)
    ).inc()
    http_request_duration_seconds.labels(method=method, endpoint=endpoint).observe(
        duration
    )


def get_metrics_endpoint() -> tuple[bytes, str]:
    """Get metrics for Prometheus scraping."""
    return generate_latest(metrics_registry), CONTENT_TYPE_LATEST
