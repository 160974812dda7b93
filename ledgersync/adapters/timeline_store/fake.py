"""Fake timeline store for testing.

Records every call and lets tests inject failures without touching disk.
"""

from typing import Optional

from ledgersync.platform.cursors.timeline import Timeline


class FakeTimelineStore:
    """Test implementation of TimelineStore.

    Usage:
        store = FakeTimelineStore()
        store.seed("acct_1", Timeline(anchor_id="tx_9", found_oldest=True))
        await service.poll("acct_1", ...)

        assert store.saved["acct_1"][-1].anchor_id == "tx_12"
    """

    def __init__(self) -> None:
        """Initialize with empty state."""
        self._store: dict[str, Timeline] = {}
        self.saved: dict[str, list[Timeline]] = {}  # ordered history of saves per target
        self.deleted: list[str] = []
        self.calls: list[tuple] = []
        self.fail_on_save: Optional[Exception] = None

    def seed(self, target: str, timeline: Timeline) -> None:
        """Seed a timeline without recording a save."""
        self._store[target] = timeline

    async def get(self, target: str) -> Optional[Timeline]:
        """Return seeded or saved timeline, or None."""
        self.calls.append(("get", target))
        return self._store.get(target)

    async def save(self, target: str, timeline: Timeline) -> None:
        """Record and store the timeline, or raise the injected failure."""
        self.calls.append(("save", target))
        if self.fail_on_save is not None:
            raise self.fail_on_save
        self._store[target] = timeline
        self.saved.setdefault(target, []).append(timeline)

    async def delete(self, target: str) -> None:
        """Drop the target and record the deletion."""
        self.calls.append(("delete", target))
        self._store.pop(target, None)
        self.deleted.append(target)

    # Test helpers

    def current(self, target: str) -> Optional[Timeline]:
        """Timeline currently held for ``target``."""
        return self._store.get(target)

    @property
    def save_count(self) -> int:
        """Total number of successful saves across targets."""
        return sum(len(history) for history in self.saved.values())
