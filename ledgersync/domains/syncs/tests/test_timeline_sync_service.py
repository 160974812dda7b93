"""Tests for TimelineSyncService.

Covers draining a target across phases, resuming from stored state,
at-least-once delivery when the sink or source fails, stop reasons and
per-target serialization of polls and resets.
"""

import asyncio
from dataclasses import dataclass
from typing import Optional

import pytest

from ledgersync.core.exceptions import InvalidPageSizeError, InvalidStepLimitError
from ledgersync.domains.syncs.timeline_sync_service import TimelineSyncService
from ledgersync.domains.syncs.types import StopReason
from ledgersync.platform.cursors.timeline import Timeline
from ledgersync.platform.sync.records import Page, RawRecord

TARGET = "acct_1"


def _make_svc(store, metrics, **kwargs) -> TimelineSyncService:
    return TimelineSyncService(store, metrics, **kwargs)


def _ids(items) -> list[str]:
    return [item.id for item in items]


class IdMapper:
    def map(self, record: RawRecord) -> str:
        return record.id


class LoopingSource:
    """Remote that keeps handing out the same cursor."""

    async def fetch_page(self, cursor: Optional[str], page_size: int) -> Page:
        return Page(records=[RawRecord(id="a")], next_cursor="loop", has_more=True)

    async def fetch_newer(self, anchor_id: str, page_size: int) -> Page:
        return Page()


class GatedSink:
    """Sink that blocks inside ``write`` until released."""

    def __init__(self) -> None:
        self.entered = asyncio.Event()
        self.release = asyncio.Event()
        self.items: list = []

    async def write(self, target, items) -> None:
        self.entered.set()
        await self.release.wait()
        self.items.extend(items)


# ---------------------------------------------------------------------------
# Draining
# ---------------------------------------------------------------------------


class TestPoll:
    @pytest.mark.asyncio
    async def test_fresh_target_drains_in_order(
        self, fake_timeline_store, fake_metrics, fake_sink, make_source
    ):
        svc = _make_svc(fake_timeline_store, fake_metrics)

        summary = await svc.poll(TARGET, make_source(5), fake_sink, page_size=2)

        assert summary.stop_reason == StopReason.CAUGHT_UP
        assert summary.caught_up is True
        assert summary.steps == 5
        assert summary.records_delivered == 5
        assert _ids(fake_sink.items_for(TARGET)) == [f"tx_{i:04d}" for i in range(5)]
        assert fake_timeline_store.current(TARGET) == summary.timeline
        assert summary.timeline.anchor_id == "tx_0004"
        assert summary.timeline.found_oldest is True
        assert fake_timeline_store.save_count == 5
        assert [step.phase for step in fake_metrics.steps] == [
            "bootstrap",
            "bootstrap",
            "bootstrap",
            "unwind",
            "steady",
        ]
        assert [step.backlog_depth for step in fake_metrics.steps] == [1, 2, 1, 0, 0]
        assert fake_metrics.records_emitted == 5

    @pytest.mark.asyncio
    async def test_mapper_output_reaches_sink(
        self, fake_timeline_store, fake_metrics, fake_sink, make_source
    ):
        svc = _make_svc(fake_timeline_store, fake_metrics)

        await svc.poll(TARGET, make_source(3), fake_sink, mapper=IdMapper(), page_size=10)

        assert fake_sink.items_for(TARGET) == ["tx_0000", "tx_0001", "tx_0002"]

    @pytest.mark.asyncio
    async def test_resumes_from_stored_anchor(
        self, fake_timeline_store, fake_metrics, fake_sink, make_source
    ):
        fake_timeline_store.seed(TARGET, Timeline(anchor_id="tx_0002"))
        svc = _make_svc(fake_timeline_store, fake_metrics)
        source = make_source(5)

        summary = await svc.poll(TARGET, source, fake_sink, page_size=10)

        assert _ids(fake_sink.items_for(TARGET)) == ["tx_0003", "tx_0004"]
        assert summary.steps == 1
        assert source.call_count("fetch_page") == 0

    @pytest.mark.asyncio
    async def test_nothing_new_saves_nothing(
        self, fake_timeline_store, fake_metrics, fake_sink, make_source
    ):
        fake_timeline_store.seed(TARGET, Timeline(anchor_id="tx_0004"))
        svc = _make_svc(fake_timeline_store, fake_metrics)

        summary = await svc.poll(TARGET, make_source(5), fake_sink)

        assert summary.caught_up is True
        assert summary.records_delivered == 0
        assert fake_sink.batch_count == 0
        assert fake_timeline_store.save_count == 0

    @pytest.mark.asyncio
    async def test_new_records_between_polls(
        self, fake_timeline_store, fake_metrics, fake_sink, make_source
    ):
        svc = _make_svc(fake_timeline_store, fake_metrics)
        source = make_source(3)
        await svc.poll(TARGET, source, fake_sink, page_size=2)

        source.append("tx_0003", "tx_0004")
        summary = await svc.poll(TARGET, source, fake_sink, page_size=2)

        assert summary.records_delivered == 2
        assert _ids(fake_sink.items_for(TARGET)) == [f"tx_{i:04d}" for i in range(5)]

    @pytest.mark.asyncio
    async def test_targets_are_independent(
        self, fake_timeline_store, fake_metrics, fake_sink, make_source
    ):
        svc = _make_svc(fake_timeline_store, fake_metrics)

        await asyncio.gather(
            svc.poll("acct_1", make_source(3), fake_sink, page_size=2),
            svc.poll("acct_2", make_source(4), fake_sink, page_size=2),
        )

        assert len(fake_sink.items_for("acct_1")) == 3
        assert len(fake_sink.items_for("acct_2")) == 4
        assert fake_timeline_store.current("acct_2").anchor_id == "tx_0003"


# ---------------------------------------------------------------------------
# Stop reasons
# ---------------------------------------------------------------------------


@dataclass
class StopCase:
    name: str
    records: int
    page_size: int
    max_steps: int
    expected_reason: StopReason
    expected_steps: int


STOP_CASES = [
    StopCase("empty_remote", 0, 10, 50, StopReason.CAUGHT_UP, 1),
    StopCase("single_page", 4, 10, 50, StopReason.CAUGHT_UP, 2),
    StopCase("budget_spent_mid_scan", 6, 2, 2, StopReason.STEP_LIMIT, 2),
    StopCase("budget_exactly_enough", 6, 2, 6, StopReason.CAUGHT_UP, 6),
]


@pytest.mark.asyncio
@pytest.mark.parametrize("case", STOP_CASES, ids=lambda c: c.name)
async def test_stop_reason(
    case: StopCase, fake_timeline_store, fake_metrics, fake_sink, make_source
):
    svc = _make_svc(fake_timeline_store, fake_metrics, max_steps_per_poll=case.max_steps)

    summary = await svc.poll(TARGET, make_source(case.records), fake_sink, page_size=case.page_size)

    assert summary.stop_reason == case.expected_reason
    assert summary.steps == case.expected_steps


class TestStall:
    @pytest.mark.asyncio
    async def test_repeated_cursor_stops_poll(self, fake_timeline_store, fake_metrics, fake_sink):
        svc = _make_svc(fake_timeline_store, fake_metrics)

        summary = await svc.poll(TARGET, LoopingSource(), fake_sink, page_size=5)

        assert summary.stop_reason == StopReason.STALLED
        assert summary.steps == 2
        assert summary.timeline.backlog_cursors == ["loop"]
        assert fake_metrics.stalls == [TARGET]
        assert fake_timeline_store.save_count == 1


# ---------------------------------------------------------------------------
# Failures
# ---------------------------------------------------------------------------


class TestFailures:
    @pytest.mark.asyncio
    async def test_sink_failure_redelivers_batch(
        self, fake_timeline_store, fake_metrics, fake_sink, make_source
    ):
        svc = _make_svc(fake_timeline_store, fake_metrics)
        source = make_source(3)
        fake_sink.fail_next = RuntimeError("sink down")

        with pytest.raises(RuntimeError, match="sink down"):
            await svc.poll(TARGET, source, fake_sink, page_size=10)

        assert fake_timeline_store.save_count == 0
        assert fake_metrics.errors == [(TARGET, "RuntimeError")]

        summary = await svc.poll(TARGET, source, fake_sink, page_size=10)

        assert summary.caught_up is True
        assert _ids(fake_sink.items_for(TARGET)) == ["tx_0000", "tx_0001", "tx_0002"]

    @pytest.mark.asyncio
    async def test_source_failure_keeps_previous_progress(
        self, fake_timeline_store, fake_metrics, fake_sink, make_source
    ):
        svc = _make_svc(fake_timeline_store, fake_metrics, max_steps_per_poll=1)
        source = make_source(6)
        await svc.poll(TARGET, source, fake_sink, page_size=2)
        saved = fake_timeline_store.current(TARGET)

        source.fail_next(ConnectionError("reset by peer"))
        with pytest.raises(ConnectionError):
            await svc.poll(TARGET, source, fake_sink, page_size=2)

        assert fake_timeline_store.current(TARGET) == saved
        assert fake_metrics.errors == [(TARGET, "ConnectionError")]

    @pytest.mark.asyncio
    async def test_store_failure_propagates(
        self, fake_timeline_store, fake_metrics, fake_sink, make_source
    ):
        svc = _make_svc(fake_timeline_store, fake_metrics)
        fake_timeline_store.fail_on_save = OSError("disk full")

        with pytest.raises(OSError, match="disk full"):
            await svc.poll(TARGET, make_source(2), fake_sink)

        assert fake_metrics.errors == [(TARGET, "OSError")]

    @pytest.mark.asyncio
    async def test_invalid_page_size(
        self, fake_timeline_store, fake_metrics, fake_sink, make_source
    ):
        svc = _make_svc(fake_timeline_store, fake_metrics)

        with pytest.raises(InvalidPageSizeError):
            await svc.poll(TARGET, make_source(2), fake_sink, page_size=0)

        assert fake_timeline_store.calls == []

    def test_invalid_default_page_size(self, fake_timeline_store, fake_metrics):
        with pytest.raises(InvalidPageSizeError):
            _make_svc(fake_timeline_store, fake_metrics, default_page_size=-5)

    @pytest.mark.parametrize("max_steps", [0, -3, True, 2.5])
    def test_invalid_step_limit(self, fake_timeline_store, fake_metrics, max_steps):
        with pytest.raises(InvalidStepLimitError) as exc_info:
            _make_svc(fake_timeline_store, fake_metrics, max_steps_per_poll=max_steps)

        assert isinstance(exc_info.value, ValueError)


# ---------------------------------------------------------------------------
# Reset and serialization
# ---------------------------------------------------------------------------


class TestReset:
    @pytest.mark.asyncio
    async def test_reset_forces_new_bootstrap(
        self, fake_timeline_store, fake_metrics, fake_sink, make_source
    ):
        fake_timeline_store.seed(TARGET, Timeline(anchor_id="tx_0001"))
        svc = _make_svc(fake_timeline_store, fake_metrics)
        source = make_source(2)

        await svc.reset(TARGET)
        await svc.poll(TARGET, source, fake_sink, page_size=10)

        assert fake_timeline_store.deleted == [TARGET]
        assert source.calls[0] == ("fetch_page", None, 10)
        assert _ids(fake_sink.items_for(TARGET)) == ["tx_0000", "tx_0001"]

    @pytest.mark.asyncio
    async def test_reset_waits_for_running_poll(
        self, fake_timeline_store, fake_metrics, make_source
    ):
        svc = _make_svc(fake_timeline_store, fake_metrics)
        sink = GatedSink()

        poll_task = asyncio.create_task(svc.poll(TARGET, make_source(1), sink, page_size=5))
        await sink.entered.wait()
        assert svc.is_polling(TARGET) is True

        reset_task = asyncio.create_task(svc.reset(TARGET))
        await asyncio.sleep(0)
        assert reset_task.done() is False
        assert fake_timeline_store.deleted == []

        sink.release.set()
        await poll_task
        await reset_task

        assert fake_timeline_store.calls == [
            ("get", TARGET),
            ("save", TARGET),
            ("delete", TARGET),
        ]
        assert svc.is_polling(TARGET) is False
        assert svc._locks == {}

    @pytest.mark.asyncio
    async def test_locks_are_released_after_polls(
        self, fake_timeline_store, fake_metrics, fake_sink, make_source
    ):
        svc = _make_svc(fake_timeline_store, fake_metrics)

        for i in range(5):
            await svc.poll(f"acct_{i}", make_source(2), fake_sink, page_size=5)
        await svc.reset("acct_0")

        assert svc._locks == {}
        assert svc._lock_users == {}
