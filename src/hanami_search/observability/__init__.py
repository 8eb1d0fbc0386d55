"""Observability module for OpenTelemetry-aligned tracing, metrics, and logging."""

from hanami_search.observability.context import TraceContext, get_trace_context, set_trace_context
from hanami_search.observability.logging import (
    JsonFormatter,
    configure_logging,
    configure_logging_from_settings,
)
from hanami_search.observability.metrics import (
    LOADS,
    MUTATIONS,
    QUERY_LATENCY,
    RESULTS,
    get_metrics,
    get_metrics_content_type,
    init_metrics,
    track_latency,
)
from hanami_search.observability.tracing import create_span, get_tracer, init_tracing


__all__ = [
    "LOADS",
    "MUTATIONS",
    "QUERY_LATENCY",
    "RESULTS",
    "JsonFormatter",
    "TraceContext",
    "configure_logging",
    "configure_logging_from_settings",
    "create_span",
    "get_metrics",
    "get_metrics_content_type",
    "get_trace_context",
    "get_tracer",
    "init_metrics",
    "init_tracing",
    "set_trace_context",
    "track_latency",
]
