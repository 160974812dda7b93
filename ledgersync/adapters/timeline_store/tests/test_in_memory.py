"""Unit tests for InMemoryTimelineStore."""

import pytest

from ledgersync.adapters.timeline_store.in_memory import InMemoryTimelineStore
from ledgersync.platform.cursors.timeline import Timeline

TARGET = "acct_123/transactions"


class TestInMemoryTimelineStore:
    @pytest.mark.asyncio
    async def test_unknown_target_is_none(self):
        store = InMemoryTimelineStore()

        assert await store.get(TARGET) is None

    @pytest.mark.asyncio
    async def test_save_then_get(self):
        store = InMemoryTimelineStore()
        timeline = Timeline(backlog_cursors=["c1"])

        await store.save(TARGET, timeline)

        assert await store.get(TARGET) == timeline
        assert store.targets == [TARGET]

    @pytest.mark.asyncio
    async def test_save_overwrites(self):
        store = InMemoryTimelineStore()
        await store.save(TARGET, Timeline(backlog_cursors=["c1"]))

        await store.save(TARGET, Timeline(anchor_id="tx_1"))

        assert (await store.get(TARGET)).anchor_id == "tx_1"

    @pytest.mark.asyncio
    async def test_delete(self):
        store = InMemoryTimelineStore()
        await store.save(TARGET, Timeline(anchor_id="tx_1"))

        await store.delete(TARGET)
        await store.delete("never-saved")

        assert await store.get(TARGET) is None
        assert store.targets == []
