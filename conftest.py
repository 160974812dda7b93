"""Shared pytest setup for ledgersync.

Lives at the repository root so that the centralized suite under tests/ and
the tests/ directories next to adapters and domain services both see the
fake fixtures below.
"""

import os

import pytest

# Register pytest-asyncio plugin at the root level
pytest_plugins = ("pytest_asyncio",)

# ---------------------------------------------------------------------------
# Environment variables: must be set before any ledgersync module import
# Uses setdefault so real env vars (CI) are never overridden.
# ---------------------------------------------------------------------------
os.environ.setdefault("LEDGERSYNC_ENVIRONMENT", "test")
os.environ.setdefault("LEDGERSYNC_LOG_LEVEL", "DEBUG")


# ---------------------------------------------------------------------------
# Shared fake fixtures, one per protocol
# ---------------------------------------------------------------------------


@pytest.fixture
def fake_timeline_store():
    """Fake TimelineStore that records saves and deletions."""
    from ledgersync.adapters.timeline_store.fake import FakeTimelineStore

    return FakeTimelineStore()


@pytest.fixture
def fake_metrics():
    """Fake TimelineSyncMetrics that records observations."""
    from ledgersync.adapters.metrics import FakeTimelineSyncMetrics

    return FakeTimelineSyncMetrics()


@pytest.fixture
def fake_sink():
    """Fake RecordSink that collects delivered batches."""
    from ledgersync.adapters.sink.fake import FakeRecordSink

    return FakeRecordSink()


@pytest.fixture
def make_source():
    """Factory for stub page sources over ``count`` chronological records."""
    from ledgersync.platform.sources.stub import StubPageSource

    def _make(count: int = 0) -> StubPageSource:
        return StubPageSource([f"tx_{i:04d}" for i in range(count)])

    return _make
