"""
Observability Infrastructure

OpenTelemetry tracing shared by the marketplace services. Prometheus metrics
live next to the code that records them (marketplace.infra.observability).
"""

from .tracing import add_span_attributes, get_tracer, setup_tracing

__all__ = [
    "setup_tracing",
    "get_tracer",
    "add_span_attributes",
]
