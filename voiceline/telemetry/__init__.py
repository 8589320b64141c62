"""Telemetry helpers and metrics."""

from .metrics import (
    ERROR_COUNTER,
    PIPELINE_OUTCOMES,
    REQUEST_COUNT,
    REQUEST_LATENCY,
    observe_pipeline_outcome,
    observe_request,
)

__all__ = [
    "ERROR_COUNTER",
    "PIPELINE_OUTCOMES",
    "REQUEST_COUNT",
    "REQUEST_LATENCY",
    "observe_pipeline_outcome",
    "observe_request",
]
