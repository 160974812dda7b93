"""Core protocols for dependency injection."""

from ledgersync.core.protocols.metrics import TimelineSyncMetrics
from ledgersync.core.protocols.page_source import PageSource
from ledgersync.core.protocols.records import RecordMapper, RecordSink
from ledgersync.core.protocols.timeline_store import TimelineStore

__all__ = [
    "PageSource",
    "RecordMapper",
    "RecordSink",
    "TimelineStore",
    "TimelineSyncMetrics",
]
