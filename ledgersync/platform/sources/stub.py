"""Stub page source for testing timeline synchronization.

Serves an in-memory, append-only ledger through the same reverse pagination
a real vendor listing exposes: newest page first, then older pages by
cursor, plus forward queries bounded by an anchor id. Records can be
appended between polls to simulate new activity, and failures can be queued
to simulate transport errors.

Cursors name the record a page ended on (``before:<id>``), so they stay
valid while new records are appended at the head, like real vendor cursors.
"""

from typing import Iterable, Optional

from ledgersync.core.exceptions import RemotePageError
from ledgersync.platform.sync.records import Page, RawRecord

CURSOR_PREFIX = "before:"


class StubPageSource:
    """PageSource over a chronological list of record ids.

    Usage:
        source = StubPageSource([f"tx_{i:03d}" for i in range(10)])
        source.append("tx_010")
        source.fail_next(ConnectionError("boom"))
    """

    def __init__(self, ids: Iterable[str] = (), name: str = "stub") -> None:
        """Initialize with records in chronological order (oldest first)."""
        self.name = name
        self._records: list[RawRecord] = []
        self._failures: list[BaseException] = []
        self.calls: list[tuple[str, Optional[str], int]] = []
        self.append(*ids)

    def append(self, *ids: str) -> None:
        """Append new records at the head of the ledger."""
        for record_id in ids:
            self._records.append(RawRecord(id=record_id, raw=record_id.encode()))

    def fail_next(self, error: BaseException) -> None:
        """Make the next fetch raise ``error`` (queued, one per call)."""
        self._failures.append(error)

    @property
    def ids(self) -> list[str]:
        """All record ids, oldest first."""
        return [record.id for record in self._records]

    async def fetch_page(self, cursor: Optional[str], page_size: int) -> Page:
        """Return up to ``page_size`` records older than the cursor, newest first."""
        self.calls.append(("fetch_page", cursor, page_size))
        self._raise_queued_failure()

        end = len(self._records)
        if cursor is not None:
            if not cursor.startswith(CURSOR_PREFIX):
                raise RemotePageError(self.name, f"Unknown cursor '{cursor}'")
            end = self._index_of(cursor[len(CURSOR_PREFIX) :])

        start = max(0, end - page_size)
        page = list(reversed(self._records[start:end]))
        has_more = start > 0
        return Page(
            records=page,
            next_cursor=f"{CURSOR_PREFIX}{page[-1].id}" if has_more and page else None,
            has_more=has_more,
        )

    async def fetch_newer(self, anchor_id: str, page_size: int) -> Page:
        """Return the ``page_size`` records right after the anchor, newest first."""
        self.calls.append(("fetch_newer", anchor_id, page_size))
        self._raise_queued_failure()

        start = self._index_of(anchor_id) + 1
        end = min(len(self._records), start + page_size)
        return Page(
            records=list(reversed(self._records[start:end])),
            next_cursor=None,
            has_more=end < len(self._records),
        )

    # -- test helpers --

    def call_count(self, method: str) -> int:
        """Number of calls made to ``method``."""
        return sum(1 for call in self.calls if call[0] == method)

    def _raise_queued_failure(self) -> None:
        if self._failures:
            raise self._failures.pop(0)

    def _index_of(self, record_id: str) -> int:
        for index, record in enumerate(self._records):
            if record.id == record_id:
                return index
        raise RemotePageError(self.name, f"Unknown record '{record_id}'")
