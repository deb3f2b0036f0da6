"""Logging, OpenTelemetry provider and span helpers for the identity service."""

from app.shared.telemetry.logging import RedactingFilter, get_logger, redact, setup_logging
from app.shared.telemetry.telemetry import TelemetryConfig, get_telemetry, set_telemetry
from app.shared.telemetry.tracing import add_span_attributes, add_span_event, traced

__all__ = [
    "RedactingFilter",
    "TelemetryConfig",
    "add_span_attributes",
    "add_span_event",
    "get_logger",
    "get_telemetry",
    "redact",
    "set_telemetry",
    "setup_logging",
    "traced",
]
