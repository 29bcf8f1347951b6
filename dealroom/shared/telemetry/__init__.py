"""Shared telemetry: logging setup, OpenTelemetry config, and tracing helpers."""

from dealroom.shared.telemetry.logging import get_logger, setup_logging
from dealroom.shared.telemetry.telemetry import (
    TelemetryConfig,
    instrument_fastapi,
    get_telemetry,
    set_telemetry,
)
from dealroom.shared.telemetry.tracing import add_span_attributes, traced

__all__ = [
    "setup_logging",
    "get_logger",
    "TelemetryConfig",
    "instrument_fastapi",
    "get_telemetry",
    "set_telemetry",
    "traced",
    "add_span_attributes",
]
