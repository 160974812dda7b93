"""In-memory timeline store.

Keeps timelines in a dict keyed by target. Suitable for single-process
deployments and short-lived jobs; state is lost on restart.

Guarded by an asyncio.Lock, so concurrent coroutines within a single
event loop see consistent state.
"""

from __future__ import annotations

import asyncio
from typing import Optional

from ledgersync.platform.cursors.timeline import Timeline


class InMemoryTimelineStore:
    """In-memory implementation of the TimelineStore protocol."""

    def __init__(self) -> None:
        """Initialize an empty store."""
        self._timelines: dict[str, Timeline] = {}
        self._lock = asyncio.Lock()

    async def get(self, target: str) -> Optional[Timeline]:
        """Return the stored timeline for ``target``, if any."""
        async with self._lock:
            return self._timelines.get(target)

    async def save(self, target: str, timeline: Timeline) -> None:
        """Store ``timeline`` for ``target``."""
        async with self._lock:
            self._timelines[target] = timeline

    async def delete(self, target: str) -> None:
        """Forget ``target``; unknown targets are ignored."""
        async with self._lock:
            self._timelines.pop(target, None)

    @property
    def targets(self) -> list[str]:
        """Targets with a stored timeline. Not locked, for diagnostics."""
        return sorted(self._timelines)
