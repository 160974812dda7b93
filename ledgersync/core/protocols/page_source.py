"""PageSource protocol for reverse-paginated remote listings.

A page source is the only I/O the timeline engine performs. Implementations
own authentication, transport and vendor payload parsing; the engine only
needs two listings:

    # Backward: newest page first, then older pages by cursor
    page = await source.fetch_page(cursor=None, page_size=100)

    # Forward-bounded: records immediately newer than a known record
    page = await source.fetch_newer(anchor_id="tx_42", page_size=100)

Any exception raised here aborts the current step and leaves the caller's
timeline untouched.
"""

from typing import Optional, Protocol, runtime_checkable

from ledgersync.platform.sync.records import Page


@runtime_checkable
class PageSource(Protocol):
    """Protocol for a remote listing with reverse-chronological cursor pagination."""

    async def fetch_page(self, cursor: Optional[str], page_size: int) -> Page:
        """Fetch one page walking backward in time.

        Args:
            cursor: Opaque token from a previous page's ``next_cursor``, or
                None for the newest page.
            page_size: Maximum number of records to return.

        Returns:
            Page with records newest-first; ``has_more`` is False when no
            older records exist beyond this page.
        """
        ...

    async def fetch_newer(self, anchor_id: str, page_size: int) -> Page:
        """Fetch the records immediately newer than ``anchor_id``.

        Args:
            anchor_id: Identifier of a record already delivered.
            page_size: Maximum number of records to return.

        Returns:
            Page with records newest-first, holding the oldest ``page_size``
            records newer than the anchor; ``has_more`` is True when even
            newer records remain.
        """
        ...
