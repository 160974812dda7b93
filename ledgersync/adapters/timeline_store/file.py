"""File-backed timeline store.

One JSON file per target under a state directory. Writes go to a temporary
sibling first and are moved into place with ``os.replace``, so a crash
mid-write leaves either the old or the new timeline on disk, never half of
one.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional, Union
from urllib.parse import quote

import aiofiles
import aiofiles.os

from ledgersync.core.config import settings
from ledgersync.core.logging import logger
from ledgersync.platform.cursors.timeline import Timeline


class FileTimelineStore:
    """TimelineStore persisting each target as ``<state_dir>/<target>.json``."""

    SUFFIX = ".json"

    def __init__(self, state_dir: Optional[Union[str, Path]] = None) -> None:
        """Initialize the store.

        Args:
            state_dir: Directory holding the timeline files, created on first save.
                Defaults to STATE_DIR.
        """
        self._state_dir = Path(state_dir if state_dir is not None else settings.STATE_DIR)

    @property
    def state_dir(self) -> Path:
        """Directory holding the timeline files."""
        return self._state_dir

    def path_for(self, target: str) -> Path:
        """File path of ``target``'s timeline; the target name is percent-encoded."""
        return self._state_dir / f"{quote(target, safe='')}{self.SUFFIX}"

    async def get(self, target: str) -> Optional[Timeline]:
        """Load ``target``'s timeline.

        Raises:
            TimelineCorruptError: If the file exists but does not hold a valid timeline.
        """
        path = self.path_for(target)
        try:
            async with aiofiles.open(path, "r", encoding="utf-8") as f:
                content = await f.read()
        except FileNotFoundError:
            return None
        return Timeline.load(content)

    async def save(self, target: str, timeline: Timeline) -> None:
        """Atomically write ``target``'s timeline."""
        await aiofiles.os.makedirs(self._state_dir, exist_ok=True)
        path = self.path_for(target)
        tmp_path = path.with_name(f".{path.name}.tmp")
        async with aiofiles.open(tmp_path, "w", encoding="utf-8") as f:
            await f.write(timeline.to_json())
            await f.flush()
            await aiofiles.os.wrap(os.fsync)(f.fileno())
        await aiofiles.os.replace(tmp_path, path)

    async def delete(self, target: str) -> None:
        """Remove ``target``'s timeline file if present."""
        try:
            await aiofiles.os.remove(self.path_for(target))
        except FileNotFoundError:
            return
        logger.info(f"[FileTimelineStore] Deleted timeline for '{target}'")
