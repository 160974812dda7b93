"""Metrics adapters: Prometheus and Fake implementations."""

from ledgersync.adapters.metrics.timeline_sync import (
    FakeTimelineSyncMetrics,
    PrometheusTimelineSyncMetrics,
    StepRecord,
)

__all__ = [
    "FakeTimelineSyncMetrics",
    "PrometheusTimelineSyncMetrics",
    "StepRecord",
]
