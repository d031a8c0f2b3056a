"""
Metrics sinks for lookup timing.

The resolver reports each cascade stage as ``record(event, duration_ms, tags)``.
Sinks are best-effort: implementations swallow their own failures, and the
resolver guards every call as well.

- LoggingMetricsSink: one log line per event on the "judgefinder.metrics" logger
- OTelMetricsSink: ``judge_lookup_duration_ms`` histogram via OpenTelemetry
- NullMetricsSink: discards everything
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping

from src.common.telemetry import get_meter

logger = logging.getLogger(__name__)

GOOD_THRESHOLD_MS = 100
NEEDS_IMPROVEMENT_THRESHOLD_MS = 500


def rate_duration(duration_ms: float) -> str:
    """Bucket a lookup duration into good / needs-improvement / poor."""
    if duration_ms < GOOD_THRESHOLD_MS:
        return "good"
    if duration_ms < NEEDS_IMPROVEMENT_THRESHOLD_MS:
        return "needs-improvement"
    return "poor"


class MetricsSink(ABC):
    """Base class for timing sinks."""

    @abstractmethod
    async def record(
        self,
        event: str,
        duration_ms: float,
        tags: Mapping[str, str] | None = None,
    ) -> None:
        """
        Record one timed event.

        Note:
            Implementations must not raise; lookups never fail because
            metrics could not be written.
        """
        ...


class LoggingMetricsSink(MetricsSink):
    """Log each event at INFO to a dedicated logger for easy filtering."""

    def __init__(self, logger_name: str = "judgefinder.metrics"):
        self._logger = logging.getLogger(logger_name)

    async def record(
        self,
        event: str,
        duration_ms: float,
        tags: Mapping[str, str] | None = None,
    ) -> None:
        try:
            rendered = " ".join(f"{k}={v}" for k, v in sorted((tags or {}).items()))
            self._logger.info(
                f"{event} took {duration_ms:.1f}ms ({rate_duration(duration_ms)}) {rendered}".rstrip()
            )
        except Exception as e:
            logger.debug(f"LoggingMetricsSink failed: {e}")


class OTelMetricsSink(MetricsSink):
    """Record events on the ``judge_lookup_duration_ms`` histogram."""

    def __init__(self, meter_name: str = "judgefinder"):
        meter = get_meter(meter_name)
        self._histogram = meter.create_histogram(
            name="judge_lookup_duration_ms",
            description="Judge lookup stage duration",
            unit="ms",
        )

    async def record(
        self,
        event: str,
        duration_ms: float,
        tags: Mapping[str, str] | None = None,
    ) -> None:
        try:
            attributes = {"event": event, "rating": rate_duration(duration_ms)}
            # Per-identifier tags would explode series cardinality
            attributes.update({k: v for k, v in (tags or {}).items() if k != "identifier"})
            self._histogram.record(duration_ms, attributes)
        except Exception as e:
            logger.debug(f"OTelMetricsSink failed: {e}")


class NullMetricsSink(MetricsSink):
    """No-op sink for tests or disabled metrics."""

    async def record(
        self,
        event: str,
        duration_ms: float,
        tags: Mapping[str, str] | None = None,
    ) -> None:
        pass


def create_metrics_sink(kind: str) -> MetricsSink:
    """Build a sink by name: ``logging``, ``otel`` or ``none``."""
    if kind == "logging":
        return LoggingMetricsSink()
    if kind == "otel":
        return OTelMetricsSink()
    if kind == "none":
        return NullMetricsSink()
    raise ValueError(f"Unknown metrics sink: {kind}")
