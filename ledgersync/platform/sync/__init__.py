"""Timeline synchronization engine."""

from ledgersync.platform.sync.records import AdvanceResult, Page, RawRecord, SyncPhase
from ledgersync.platform.sync.streams import StreamsAdvanceResult, advance_streams
from ledgersync.platform.sync.timeline_engine import (
    TimelineEngine,
    records_newer_than,
    validate_page_size,
)

__all__ = [
    "AdvanceResult",
    "Page",
    "RawRecord",
    "StreamsAdvanceResult",
    "SyncPhase",
    "TimelineEngine",
    "advance_streams",
    "records_newer_than",
    "validate_page_size",
]
