"""Timeline sync service: drives the engine for one target per poll tick."""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from ledgersync.core.config import settings
from ledgersync.core.exceptions import InvalidStepLimitError
from ledgersync.core.logging import logger
from ledgersync.core.protocols.metrics import TimelineSyncMetrics
from ledgersync.core.protocols.page_source import PageSource
from ledgersync.core.protocols.records import RecordMapper, RecordSink
from ledgersync.core.protocols.timeline_store import TimelineStore
from ledgersync.domains.syncs.protocols import TimelineSyncServiceProtocol
from ledgersync.domains.syncs.types import PollSummary, StopReason
from ledgersync.platform.cursors.timeline import Timeline
from ledgersync.platform.sync.records import AdvanceResult
from ledgersync.platform.sync.timeline_engine import TimelineEngine, validate_page_size


class TimelineSyncService(TimelineSyncServiceProtocol):
    """Polls targets through the timeline engine and persists their state.

    Each poll loads the target's timeline, then repeats advance → map →
    sink → save until the remote reports nothing more, the step budget is
    spent, or a step makes no progress. The timeline is saved only after the
    sink accepted the batch, so a failure anywhere redelivers that batch on
    the next poll instead of skipping it.

    Steps for one target never interleave: every poll holds the target's
    lock. Different targets poll concurrently.
    """

    def __init__(
        self,
        store: TimelineStore,
        metrics: TimelineSyncMetrics,
        *,
        default_page_size: Optional[int] = None,
        max_steps_per_poll: Optional[int] = None,
    ) -> None:
        """Initialize with injected store and metrics.

        Args:
            store: Where timelines are persisted between polls.
            metrics: Step/error/stall instrumentation.
            default_page_size: Page size when a poll does not pass one.
                Defaults to DEFAULT_PAGE_SIZE.
            max_steps_per_poll: Step budget per poll. Defaults to MAX_STEPS_PER_POLL.

        Raises:
            InvalidPageSizeError: If ``default_page_size`` is not a positive integer.
            InvalidStepLimitError: If ``max_steps_per_poll`` is not a positive integer.
        """
        self._store = store
        self._metrics = metrics
        self._default_page_size = validate_page_size(
            default_page_size if default_page_size is not None else settings.DEFAULT_PAGE_SIZE
        )
        if max_steps_per_poll is None:
            max_steps_per_poll = settings.MAX_STEPS_PER_POLL
        if (
            isinstance(max_steps_per_poll, bool)
            or not isinstance(max_steps_per_poll, int)
            or max_steps_per_poll <= 0
        ):
            raise InvalidStepLimitError(max_steps_per_poll)
        self._max_steps = max_steps_per_poll
        self._locks: dict[str, asyncio.Lock] = {}
        self._lock_users: dict[str, int] = {}

    @asynccontextmanager
    async def _target_lock(self, target: str) -> AsyncIterator[None]:
        """Hold ``target``'s lock; the lock is dropped once nobody holds or awaits it."""
        lock = self._locks.setdefault(target, asyncio.Lock())
        self._lock_users[target] = self._lock_users.get(target, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[target] -= 1
            if not self._lock_users[target]:
                del self._lock_users[target]
                del self._locks[target]

    def is_polling(self, target: str) -> bool:
        """Whether a poll currently holds ``target``'s lock."""
        lock = self._locks.get(target)
        return lock is not None and lock.locked()

    async def poll(
        self,
        target: str,
        source: PageSource,
        sink: RecordSink,
        mapper: Optional[RecordMapper] = None,
        page_size: Optional[int] = None,
    ) -> PollSummary:
        """Drain available steps for ``target``.

        Args:
            target: Sync target key (one timeline per target).
            source: Remote listing of the target.
            sink: Receives each chronological batch.
            mapper: Optional record mapper; raw records are passed through without one.
            page_size: Page size for this poll, defaults to the service default.

        Returns:
            PollSummary with the step count, delivered records and final timeline.

        Raises:
            InvalidPageSizeError: If ``page_size`` is not a positive integer.
            TimelineCorruptError: If the stored timeline cannot be loaded.
            Exception: Source, mapper and sink errors, after logging them.
        """
        page_size = validate_page_size(
            page_size if page_size is not None else self._default_page_size
        )
        engine = TimelineEngine(source)
        poll_logger = logger.with_context(target=target)

        async with self._target_lock(target):
            timeline = await self._store.get(target) or Timeline()
            steps = 0
            delivered = 0
            stop_reason = StopReason.STEP_LIMIT

            while steps < self._max_steps:
                phase = engine.phase_of(timeline)
                try:
                    result = await self._step(engine, target, timeline, page_size, sink, mapper)
                except Exception as e:
                    self._metrics.observe_error(target, type(e).__name__)
                    poll_logger.error(
                        f"[TimelineSync] Step {steps + 1} failed in {phase.value} phase: {e}"
                    )
                    raise

                steps += 1
                delivered += len(result.records)
                progressed = bool(result.records) or result.timeline != timeline
                timeline = result.timeline

                if not result.has_more:
                    stop_reason = StopReason.CAUGHT_UP
                    break
                if not progressed:
                    self._metrics.observe_stall(target)
                    poll_logger.warning(
                        f"[TimelineSync] No progress in {phase.value} phase although the "
                        f"remote reports more data; stopping after {steps} steps"
                    )
                    stop_reason = StopReason.STALLED
                    break

            poll_logger.info(
                f"[TimelineSync] Poll finished: {stop_reason.value}, {steps} steps, "
                f"{delivered} records, backlog={len(timeline.backlog_cursors)}, "
                f"found_oldest={timeline.found_oldest}"
            )
            return PollSummary(
                target=target,
                steps=steps,
                records_delivered=delivered,
                timeline=timeline,
                stop_reason=stop_reason,
            )

    async def _step(
        self,
        engine: TimelineEngine,
        target: str,
        timeline: Timeline,
        page_size: int,
        sink: RecordSink,
        mapper: Optional[RecordMapper],
    ) -> AdvanceResult:
        """Advance once, hand the batch to the sink, then persist the new timeline."""
        result = await engine.advance(timeline, page_size)

        if result.records:
            if mapper is not None:
                items = [mapper.map(record) for record in result.records]
            else:
                items = list(result.records)
            await sink.write(target, items)

        if result.timeline != timeline:
            await self._store.save(target, result.timeline)

        self._metrics.observe_step(
            target,
            result.phase.value,
            len(result.records),
            len(result.timeline.backlog_cursors),
        )
        return result

    async def reset(self, target: str) -> None:
        """Forget ``target``'s timeline, waiting for any running poll to finish."""
        async with self._target_lock(target):
            await self._store.delete(target)
            logger.with_context(target=target).info(
                "[TimelineSync] Timeline reset; next poll re-scans from the newest page"
            )
