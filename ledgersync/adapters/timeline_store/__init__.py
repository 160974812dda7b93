"""Timeline store adapters."""

from ledgersync.adapters.timeline_store.fake import FakeTimelineStore
from ledgersync.adapters.timeline_store.file import FileTimelineStore
from ledgersync.adapters.timeline_store.in_memory import InMemoryTimelineStore

__all__ = ["FakeTimelineStore", "FileTimelineStore", "InMemoryTimelineStore"]
