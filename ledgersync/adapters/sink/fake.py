"""Fake record sink for testing.

Collects every batch handed over by a poll and can be told to fail, to
check that a rejected batch is offered again on the next poll.
"""

from typing import Any, Optional, Sequence


class FakeRecordSink:
    """Test implementation of RecordSink.

    Usage:
        sink = FakeRecordSink()
        await service.poll("acct_1", source, sink)

        assert sink.items_for("acct_1") == [...]
    """

    def __init__(self) -> None:
        """Initialize with no batches."""
        self.batches: list[tuple[str, list[Any]]] = []
        self.fail_next: Optional[Exception] = None

    async def write(self, target: str, items: Sequence[Any]) -> None:
        """Record the batch, or raise the injected failure once."""
        if self.fail_next is not None:
            error, self.fail_next = self.fail_next, None
            raise error
        self.batches.append((target, list(items)))

    # Test helpers

    def items_for(self, target: str) -> list[Any]:
        """All items written for ``target``, in delivery order."""
        return [item for name, items in self.batches if name == target for item in items]

    @property
    def batch_count(self) -> int:
        """Number of accepted batches across targets."""
        return len(self.batches)
