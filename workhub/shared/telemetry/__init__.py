"""Shared telemetry: logging setup, OpenTelemetry tracing and the traced decorator."""

from workhub.shared.telemetry.logging import get_logger, setup_logging
from workhub.shared.telemetry.telemetry import TracingSetup, build_exporter
from workhub.shared.telemetry.tracing import traced

__all__ = [
    "TracingSetup",
    "build_exporter",
    "get_logger",
    "setup_logging",
    "traced",
]
