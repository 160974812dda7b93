"""Page source implementations."""

from ledgersync.platform.sources.http_cursor import CursorPaginationConfig, HttpCursorPageSource
from ledgersync.platform.sources.stub import StubPageSource

__all__ = ["CursorPaginationConfig", "HttpCursorPageSource", "StubPageSource"]
