"""Value objects for the syncs domain."""

from dataclasses import dataclass
from enum import Enum

from ledgersync.platform.cursors.timeline import Timeline


class StopReason(str, Enum):
    """Why a poll stopped draining steps."""

    CAUGHT_UP = "caught_up"
    STEP_LIMIT = "step_limit"
    STALLED = "stalled"


@dataclass(frozen=True)
class PollSummary:
    """Result of TimelineSyncService.poll()."""

    target: str
    steps: int
    records_delivered: int
    timeline: Timeline
    stop_reason: StopReason

    @property
    def caught_up(self) -> bool:
        """Whether the poll drained everything the remote offered."""
        return self.stop_reason == StopReason.CAUGHT_UP
