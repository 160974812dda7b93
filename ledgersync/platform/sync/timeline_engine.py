"""Timeline engine: incremental sync over reverse-paginated, anchor-less listings.

Remote ledgers in this domain only list "newest first, then older than X".
There is no way to ask for the oldest record and no "since" filter, so the
engine works in two phases over one persisted ``Timeline``:

1. Bootstrap. Walk backward page by page, pushing every hop's cursor onto
   the backlog so an interrupted scan resumes where it stopped. When a page
   reports no older data, its last record is the oldest record of the whole
   dataset. It is emitted alone and becomes the (provisional) anchor.
   Remaining backlog cursors are then consumed one per step while records
   newer than the anchor are delivered forward.
2. Steady state. Each step asks for the records immediately newer than the
   anchor, delivers them oldest-first and moves the anchor to the newest one.

One ``advance`` call performs one page fetch and one state transition. The
input timeline is never mutated: if the fetch raises, the caller still holds
the previous state and simply retries the same step later.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from ledgersync.core.exceptions import InvalidPageSizeError
from ledgersync.platform.cursors.timeline import Timeline
from ledgersync.platform.sync.records import AdvanceResult, Page, RawRecord, SyncPhase

if TYPE_CHECKING:
    from ledgersync.core.protocols.page_source import PageSource


def validate_page_size(page_size: object) -> int:
    """Return ``page_size`` if it is a positive int, else raise InvalidPageSizeError."""
    if isinstance(page_size, bool) or not isinstance(page_size, int) or page_size <= 0:
        raise InvalidPageSizeError(page_size)
    return page_size


def records_newer_than(
    records: list[RawRecord], anchor_id: str, limit: int
) -> tuple[list[RawRecord], bool]:
    """Select records newer than the anchor from a newest-first page.

    Everything from the anchor onward in newest-first order is at or before
    the anchor and is dropped, as are repeated identifiers. The survivors are
    returned oldest-first and capped to ``limit``, keeping the oldest ones so
    that nothing between the anchor and the new high-water mark is skipped.

    Returns:
        (batch, capped) where ``capped`` says records were held back.
    """
    fresh: list[RawRecord] = []
    seen: set[str] = set()
    for record in records:
        if record.id == anchor_id:
            break
        if record.id in seen:
            continue
        seen.add(record.id)
        fresh.append(record)
    fresh.reverse()
    return fresh[:limit], len(fresh) > limit


class TimelineEngine:
    """Step function advancing a Timeline against one page source.

    Stateless apart from the injected source, so one engine may serve any
    number of timelines. Steps on the *same* timeline must be sequential:
    the result of step k is the input of step k+1.

    Usage:
        engine = TimelineEngine(source)
        result = await engine.advance(timeline, page_size=100)
        deliver(result.records)
        persist(result.timeline)
    """

    def __init__(self, source: PageSource) -> None:
        """Initialize the engine.

        Args:
            source: Remote listing to synchronize.
        """
        self._source = source

    @staticmethod
    def phase_of(timeline: Timeline) -> SyncPhase:
        """Phase the next step on ``timeline`` will run."""
        if timeline.found_oldest and timeline.anchor_id is not None:
            return SyncPhase.STEADY
        if timeline.has_provisional_anchor:
            return SyncPhase.UNWIND
        return SyncPhase.BOOTSTRAP

    async def advance(self, timeline: Timeline, page_size: int) -> AdvanceResult:
        """Run one synchronization step.

        Args:
            timeline: State returned by the previous step (or a fresh Timeline).
            page_size: Maximum records requested from the remote.

        Returns:
            AdvanceResult with the chronological batch, the next timeline and
            whether another step would make progress right away.

        Raises:
            InvalidPageSizeError: If ``page_size`` is not a positive integer.
            Exception: Whatever the page source raises, unchanged.
        """
        validate_page_size(page_size)

        phase = self.phase_of(timeline)
        if phase == SyncPhase.STEADY:
            return await self._fetch_forward(timeline, page_size)
        if phase == SyncPhase.UNWIND:
            return await self._unwind(timeline, page_size)
        return await self._scan_backward(timeline, page_size)

    # ------------------------------------------------------------------
    # Bootstrap
    # ------------------------------------------------------------------

    async def _scan_backward(self, timeline: Timeline, page_size: int) -> AdvanceResult:
        backlog = timeline.backlog_cursors
        page = await self._source.fetch_page(timeline.top_cursor, page_size)

        if not page.records and not backlog:
            # Nothing at all behind the newest page: empty dataset.
            return AdvanceResult(
                records=[],
                timeline=timeline.evolve(anchor_id=None, backlog_cursors=[], found_oldest=True),
                has_more=False,
                phase=SyncPhase.BOOTSTRAP,
            )

        if not page.has_more:
            if page.records:
                return self._reach_boundary(timeline, page)
            return await self._boundary_behind_empty_page(timeline, page_size)

        next_cursor = page.next_cursor
        if not next_cursor or next_cursor in backlog:
            # Remote claims older data but hands out no new cursor: no progress possible.
            return AdvanceResult(
                records=[], timeline=timeline, has_more=True, phase=SyncPhase.BOOTSTRAP
            )

        return AdvanceResult(
            records=[],
            timeline=timeline.evolve(backlog_cursors=[*backlog, next_cursor], found_oldest=False),
            has_more=True,
            phase=SyncPhase.BOOTSTRAP,
        )

    async def _boundary_behind_empty_page(
        self, timeline: Timeline, page_size: int
    ) -> AdvanceResult:
        """Handle a cursor that led to an empty last page.

        The previous page promised older data that turned out to be empty, so
        its last record is the oldest one. The previous page is fetched again
        to read it.
        """
        backlog = timeline.backlog_cursors
        parent_cursor: Optional[str] = backlog[-2] if len(backlog) > 1 else None
        parent = await self._source.fetch_page(parent_cursor, page_size)

        without_dead_cursor = timeline.evolve(backlog_cursors=backlog[:-1])
        if not parent.records:
            return AdvanceResult(
                records=[],
                timeline=without_dead_cursor,
                has_more=True,
                phase=SyncPhase.BOOTSTRAP,
            )
        return self._reach_boundary(without_dead_cursor, parent)

    @staticmethod
    def _reach_boundary(timeline: Timeline, page: Page) -> AdvanceResult:
        oldest = page.records[-1]
        backlog = timeline.backlog_cursors[:-1]
        found_oldest = not backlog
        # Newer records are known to exist if the page held more than the
        # oldest record or if the scan had to page back to get here.
        newer_known = len(page.records) > 1 or bool(timeline.backlog_cursors)
        return AdvanceResult(
            records=[oldest],
            timeline=timeline.evolve(
                anchor_id=oldest.id, backlog_cursors=backlog, found_oldest=found_oldest
            ),
            has_more=not found_oldest or newer_known,
            phase=SyncPhase.BOOTSTRAP,
        )

    async def _unwind(self, timeline: Timeline, page_size: int) -> AdvanceResult:
        anchor_id = timeline.anchor_id
        page = await self._source.fetch_newer(anchor_id, page_size)
        batch, capped = records_newer_than(page.records, anchor_id, page_size)

        # Nothing newer than the anchor means there is nothing left to unwind.
        backlog = timeline.backlog_cursors[:-1] if batch else []
        found_oldest = not backlog
        return AdvanceResult(
            records=batch,
            timeline=timeline.evolve(
                anchor_id=batch[-1].id if batch else anchor_id,
                backlog_cursors=backlog,
                found_oldest=found_oldest,
            ),
            has_more=not found_oldest or page.has_more or capped,
            phase=SyncPhase.UNWIND,
        )

    # ------------------------------------------------------------------
    # Steady state
    # ------------------------------------------------------------------

    async def _fetch_forward(self, timeline: Timeline, page_size: int) -> AdvanceResult:
        anchor_id = timeline.anchor_id
        page = await self._source.fetch_newer(anchor_id, page_size)
        batch, capped = records_newer_than(page.records, anchor_id, page_size)

        if not batch:
            return AdvanceResult(
                records=[], timeline=timeline, has_more=page.has_more, phase=SyncPhase.STEADY
            )
        return AdvanceResult(
            records=batch,
            timeline=timeline.evolve(anchor_id=batch[-1].id),
            has_more=page.has_more or capped,
            phase=SyncPhase.STEADY,
        )
