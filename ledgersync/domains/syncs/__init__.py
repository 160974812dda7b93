"""Syncs domain: polling targets through the timeline engine."""

from ledgersync.domains.syncs.timeline_sync_service import TimelineSyncService
from ledgersync.domains.syncs.types import PollSummary, StopReason

__all__ = ["PollSummary", "StopReason", "TimelineSyncService"]
