"""ledgersync: incremental sync of reverse-paginated, anchor-less ledger listings."""

from ledgersync.platform.cursors import Timeline, TimelineSet
from ledgersync.platform.sync import (
    AdvanceResult,
    Page,
    RawRecord,
    TimelineEngine,
    advance_streams,
)

__version__ = "0.1.0"

__all__ = [
    "AdvanceResult",
    "Page",
    "RawRecord",
    "Timeline",
    "TimelineEngine",
    "TimelineSet",
    "advance_streams",
]
