"""
Tests for metrics sinks.
"""

import logging
from unittest.mock import MagicMock

import pytest

from src.judgefinder.observability import (
    LoggingMetricsSink,
    NullMetricsSink,
    OTelMetricsSink,
    create_metrics_sink,
    rate_duration,
)


@pytest.mark.parametrize(
    "duration_ms, rating",
    [(0, "good"), (99.9, "good"), (100, "needs-improvement"), (499, "needs-improvement"), (500, "poor")],
)
def test_rate_duration(duration_ms, rating):
    assert rate_duration(duration_ms) == rating


async def test_logging_sink(caplog):
    sink = LoggingMetricsSink()
    with caplog.at_level(logging.INFO, logger="judgefinder.metrics"):
        await sink.record("judge_lookup.cache", 12.34, {"status": "miss", "identifier": "jane-doe"})

    assert caplog.records[-1].name == "judgefinder.metrics"
    assert caplog.records[-1].getMessage() == (
        "judge_lookup.cache took 12.3ms (good) identifier=jane-doe status=miss"
    )


async def test_otel_sink_drops_identifier_tag():
    sink = OTelMetricsSink()
    sink._histogram = MagicMock()

    await sink.record("judge_lookup.exact_identifier", 250.0, {"identifier": "x", "status": "hit"})

    sink._histogram.record.assert_called_once_with(
        250.0,
        {"event": "judge_lookup.exact_identifier", "rating": "needs-improvement", "status": "hit"},
    )


async def test_otel_sink_never_raises():
    sink = OTelMetricsSink()
    sink._histogram = MagicMock()
    sink._histogram.record.side_effect = RuntimeError("exporter gone")

    await sink.record("judge_lookup.cache", 1.0)


def test_factory():
    assert isinstance(create_metrics_sink("logging"), LoggingMetricsSink)
    assert isinstance(create_metrics_sink("otel"), OTelMetricsSink)
    assert isinstance(create_metrics_sink("none"), NullMetricsSink)
    with pytest.raises(ValueError):
        create_metrics_sink("statsd")
