"""
Telemetry Module.

Thin layer over OpenTelemetry for spans and metrics.

Usage:
    from src.common.telemetry import init_telemetry, get_tracer, get_meter

    # Initialize at application startup
    init_telemetry(service_name="judgefinder", otlp_endpoint="http://localhost:4317")

    tracer = get_tracer(__name__)
    with tracer.start_as_current_span("judge.resolve") as span:
        span.set_attribute("judge.identifier", identifier)
        ...
"""

from src.common.telemetry.setup import (
    TelemetryConfig,
    get_meter,
    get_tracer,
    init_telemetry,
    is_telemetry_enabled,
    shutdown_telemetry,
)

__all__ = [
    "init_telemetry",
    "shutdown_telemetry",
    "get_tracer",
    "get_meter",
    "is_telemetry_enabled",
    "TelemetryConfig",
]
