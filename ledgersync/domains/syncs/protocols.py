"""Protocols for the syncs domain."""

from typing import Optional, Protocol

from ledgersync.core.protocols.page_source import PageSource
from ledgersync.core.protocols.records import RecordMapper, RecordSink
from ledgersync.domains.syncs.types import PollSummary


class TimelineSyncServiceProtocol(Protocol):
    """Polls sync targets and persists their timelines."""

    async def poll(
        self,
        target: str,
        source: PageSource,
        sink: RecordSink,
        mapper: Optional[RecordMapper] = None,
        page_size: Optional[int] = None,
    ) -> PollSummary:
        """Drain available steps for ``target`` and persist the resulting timeline."""
        ...

    async def reset(self, target: str) -> None:
        """Forget ``target``'s timeline so the next poll re-scans from scratch."""
        ...
