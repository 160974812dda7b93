"""Advance several named timelines that share one persisted state."""

from dataclasses import dataclass, field
from typing import Mapping

from ledgersync.core.exceptions import UnknownStreamError
from ledgersync.platform.cursors.timeline_set import TimelineSet
from ledgersync.platform.sync.records import RawRecord
from ledgersync.platform.sync.timeline_engine import TimelineEngine, validate_page_size


@dataclass(frozen=True)
class StreamsAdvanceResult:
    """Outcome of advancing every stream once.

    Attributes:
        records: Chronological batch per stream (streams with nothing new map to []).
        state: Timeline set to persist.
        has_more: True if any stream would make progress on another step.
    """

    records: dict[str, list[RawRecord]] = field(default_factory=dict)
    state: TimelineSet = field(default_factory=TimelineSet)
    has_more: bool = False


async def advance_streams(
    engines: Mapping[str, TimelineEngine],
    state: TimelineSet,
    page_size: int,
) -> StreamsAdvanceResult:
    """Advance each stream's timeline by one step.

    Streams run sequentially in ``engines`` order. If any step raises, the
    exception propagates and no stream's progress is kept: the caller still
    holds ``state`` and the whole step is retried later.

    Args:
        engines: Engine per stream name.
        state: Persisted timelines; streams absent from it start fresh.
        page_size: Page size for every stream.

    Raises:
        UnknownStreamError: If ``state`` holds a stream with no engine.
        InvalidPageSizeError: If ``page_size`` is not a positive integer.
    """
    validate_page_size(page_size)
    for stream in state.timelines:
        if stream not in engines:
            raise UnknownStreamError(stream)

    records: dict[str, list[RawRecord]] = {}
    updates = {}
    has_more = False
    for stream, engine in engines.items():
        result = await engine.advance(state.get(stream), page_size)
        records[stream] = result.records
        updates[stream] = result.timeline
        has_more = has_more or result.has_more

    return StreamsAdvanceResult(
        records=records,
        state=state.with_timelines(updates),
        has_more=has_more,
    )
