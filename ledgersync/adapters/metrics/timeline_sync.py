"""Timeline sync metrics adapters (Prometheus + Fake).

Prometheus implementation exposes step/record/error counters and a backlog
depth gauge on an injected CollectorRegistry.
"""

from dataclasses import dataclass

from prometheus_client import CollectorRegistry, Counter, Gauge

from ledgersync.core.protocols.metrics import TimelineSyncMetrics


class PrometheusTimelineSyncMetrics(TimelineSyncMetrics):
    """Prometheus-backed timeline sync metrics."""

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        self._registry = registry or CollectorRegistry()

        self._steps = Counter(
            "ledgersync_advance_steps_total",
            "Completed advance steps",
            ["stream", "phase"],
            registry=self._registry,
        )

        self._records = Counter(
            "ledgersync_records_emitted_total",
            "Records emitted by advance steps",
            ["stream"],
            registry=self._registry,
        )

        self._errors = Counter(
            "ledgersync_advance_errors_total",
            "Advance steps that raised",
            ["stream", "error_type"],
            registry=self._registry,
        )

        self._stalls = Counter(
            "ledgersync_advance_stalls_total",
            "Steps without progress although the remote reported more data",
            ["stream"],
            registry=self._registry,
        )

        self._backlog_depth = Gauge(
            "ledgersync_backlog_depth",
            "Backlog cursors still held by the stream's timeline",
            ["stream"],
            registry=self._registry,
        )

    @property
    def registry(self) -> CollectorRegistry:
        """Registry the metrics are registered on."""
        return self._registry

    # -- TimelineSyncMetrics protocol methods --

    def observe_step(self, stream: str, phase: str, records: int, backlog_depth: int) -> None:
        self._steps.labels(stream=stream, phase=phase).inc()
        if records:
            self._records.labels(stream=stream).inc(records)
        self._backlog_depth.labels(stream=stream).set(backlog_depth)

    def observe_error(self, stream: str, error_type: str) -> None:
        self._errors.labels(stream=stream, error_type=error_type).inc()

    def observe_stall(self, stream: str) -> None:
        self._stalls.labels(stream=stream).inc()


# ---------------------------------------------------------------------------
# Fake
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class StepRecord:
    """Single observe_step call captured by the fake."""

    stream: str
    phase: str
    records: int
    backlog_depth: int


class FakeTimelineSyncMetrics(TimelineSyncMetrics):
    """In-memory spy implementing the TimelineSyncMetrics protocol."""

    def __init__(self) -> None:
        self.steps: list[StepRecord] = []
        self.errors: list[tuple[str, str]] = []
        self.stalls: list[str] = []

    def observe_step(self, stream: str, phase: str, records: int, backlog_depth: int) -> None:
        self.steps.append(StepRecord(stream, phase, records, backlog_depth))

    def observe_error(self, stream: str, error_type: str) -> None:
        self.errors.append((stream, error_type))

    def observe_stall(self, stream: str) -> None:
        self.stalls.append(stream)

    # -- test helpers --

    @property
    def records_emitted(self) -> int:
        """Total records across all observed steps."""
        return sum(step.records for step in self.steps)

    def clear(self) -> None:
        """Reset all recorded state."""
        self.steps.clear()
        self.errors.clear()
        self.stalls.clear()
