"""Record sink adapters."""

from ledgersync.adapters.sink.fake import FakeRecordSink

__all__ = ["FakeRecordSink"]
