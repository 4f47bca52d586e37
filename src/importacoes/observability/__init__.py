"""
Observability module for the importacoes console.
Provides metrics capabilities.
"""

from importacoes.observability.metrics import (
    get_metrics_endpoint,
    metrics_registry,
    observe_fingerprint_duration,
    record_http_request,
    record_live_update_message,
    record_poller_tick,
    record_reprocess,
    record_repository_operation,
    record_submission,
    set_live_update_connected,
    set_poller_active,
)

__all__ = [
    "metrics_registry",
    "record_repository_operation",
    "record_submission",
    "record_reprocess",
    "record_poller_tick",
    "set_poller_active",
    "observe_fingerprint_duration",
    "record_live_update_message",
    "set_live_update_connected",
    "record_http_request",
    "get_metrics_endpoint",
]
