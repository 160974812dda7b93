"""TimelineStore protocol for persisting sync state between polls."""

from typing import Optional, Protocol, runtime_checkable

from ledgersync.platform.cursors.timeline import Timeline


@runtime_checkable
class TimelineStore(Protocol):
    """Protocol for keyed timeline persistence.

    One timeline per sync target (an account, a connector listing, ...).
    Implementations never repair corrupt state; they raise
    TimelineCorruptError and let the operator decide.
    """

    async def get(self, target: str) -> Optional[Timeline]:
        """Return the stored timeline, or None if the target was never synced."""
        ...

    async def save(self, target: str, timeline: Timeline) -> None:
        """Persist ``timeline`` for ``target``, replacing any previous value."""
        ...

    async def delete(self, target: str) -> None:
        """Forget the target's timeline so the next poll re-scans from scratch."""
        ...
