"""Metrics protocol for timeline sync instrumentation."""

from typing import Protocol, runtime_checkable


@runtime_checkable
class TimelineSyncMetrics(Protocol):
    """Protocol for recording timeline sync activity per stream."""

    def observe_step(self, stream: str, phase: str, records: int, backlog_depth: int) -> None:
        """Record one completed advance step.

        Args:
            stream: Sync target or stream name.
            phase: One of "bootstrap", "unwind", "steady".
            records: Number of records emitted by the step.
            backlog_depth: Backlog cursor count after the step.
        """
        ...

    def observe_error(self, stream: str, error_type: str) -> None:
        """Record a failed step."""
        ...

    def observe_stall(self, stream: str) -> None:
        """Record a step that made no progress although the remote claimed more data."""
        ...
