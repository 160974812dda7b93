"""Page source for JSON listing endpoints with reverse-chronological cursors.

Covers the two pagination dialects seen across ledger APIs:

- token cursors: the response carries ``next_cursor`` and the next request
  passes it back as ``?cursor=...``;
- id cursors: the response carries ``has_more`` and the next request asks
  for records ``starting_after`` the last id of the page. APIs that omit
  ``has_more`` are paged until a page comes back shorter than requested.

Both dialects bound forward queries with ``ending_before=<anchor id>``.
Parameter and key names are configurable through CursorPaginationConfig.

Transport concerns (auth headers, base URL, retries) belong to the
``httpx.AsyncClient`` handed in by the caller.
"""

import json
from typing import Any, Optional

import httpx
from pydantic import BaseModel, Field

from ledgersync.core.config import settings
from ledgersync.core.exceptions import RemotePageError
from ledgersync.platform.sync.records import Page, RawRecord


class CursorPaginationConfig(BaseModel):
    """Names of the query parameters and response keys of a listing endpoint."""

    limit_param: str = Field("limit", description="Query parameter carrying the page size")
    cursor_param: str = Field("cursor", description="Query parameter carrying the cursor")
    ending_before_param: str = Field(
        "ending_before", description="Query parameter bounding a forward query by anchor id"
    )
    data_key: str = Field("data", description="Response key holding the record list")
    id_key: str = Field("id", description="Record key holding the identifier")
    next_cursor_key: Optional[str] = Field(
        "next_cursor", description="Response key holding the next cursor (None if absent)"
    )
    has_more_key: Optional[str] = Field(
        "has_more", description="Response key holding the has-more flag (None if absent)"
    )
    cursor_from_last_id: bool = Field(
        False, description="Use the last record id of a page as the next cursor"
    )


class HttpCursorPageSource:
    """PageSource over one listing endpoint of a JSON API.

    Usage:
        async with httpx.AsyncClient(base_url=..., headers=auth) as client:
            source = HttpCursorPageSource(client, "/transactions")
            engine = TimelineEngine(source)
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        path: str,
        *,
        params: Optional[dict[str, Any]] = None,
        pagination: Optional[CursorPaginationConfig] = None,
        timeout: Optional[float] = None,
        name: Optional[str] = None,
    ) -> None:
        """Initialize the page source.

        Args:
            client: Authenticated client, usually with ``base_url`` set.
            path: Listing endpoint path.
            params: Extra query parameters sent with every request (filters).
            pagination: Parameter/key names; defaults suit token cursors.
            timeout: Per-request timeout, defaults to HTTP_TIMEOUT_SECONDS.
            name: Label used in error messages, defaults to ``path``.
        """
        self._client = client
        self._path = path
        self._params = dict(params or {})
        self._pagination = pagination or CursorPaginationConfig()
        self._timeout = timeout if timeout is not None else settings.HTTP_TIMEOUT_SECONDS
        self.name = name or path

    async def fetch_page(self, cursor: Optional[str], page_size: int) -> Page:
        """Fetch one page walking backward from ``cursor`` (newest page if None)."""
        params = {**self._params, self._pagination.limit_param: page_size}
        if cursor:
            params[self._pagination.cursor_param] = cursor
        body = await self._get(params)
        return self._to_page(body, page_size)

    async def fetch_newer(self, anchor_id: str, page_size: int) -> Page:
        """Fetch the records immediately newer than ``anchor_id``."""
        params = {
            **self._params,
            self._pagination.limit_param: page_size,
            self._pagination.ending_before_param: anchor_id,
        }
        body = await self._get(params)
        return self._to_page(body, page_size)

    async def _get(self, params: dict[str, Any]) -> dict[str, Any]:
        response = await self._client.get(self._path, params=params, timeout=self._timeout)
        response.raise_for_status()
        try:
            body = response.json()
        except ValueError as e:
            raise RemotePageError(self.name, f"Response is not JSON: {e}") from e
        if not isinstance(body, dict):
            raise RemotePageError(self.name, "Response is not a JSON object")
        return body

    def _to_page(self, body: dict[str, Any], page_size: int) -> Page:
        pagination = self._pagination
        items = body.get(pagination.data_key)
        if not isinstance(items, list):
            raise RemotePageError(self.name, f"Missing list under '{pagination.data_key}'")

        records = [self._to_record(item) for item in items]

        next_cursor = None
        if pagination.next_cursor_key:
            next_cursor = body.get(pagination.next_cursor_key) or None
        if next_cursor is None and pagination.cursor_from_last_id and records:
            next_cursor = records[-1].id

        if pagination.has_more_key and pagination.has_more_key in body:
            has_more = bool(body[pagination.has_more_key])
        elif pagination.cursor_from_last_id:
            # Without a flag, only a short page proves the listing is exhausted.
            has_more = len(records) >= page_size
        else:
            has_more = next_cursor is not None

        # Id cursors always exist for a non-empty page; only has_more says whether to follow.
        if not has_more and pagination.cursor_from_last_id:
            next_cursor = None

        return Page(
            records=records,
            next_cursor=str(next_cursor) if next_cursor is not None else None,
            has_more=has_more,
        )

    def _to_record(self, item: Any) -> RawRecord:
        if not isinstance(item, dict):
            raise RemotePageError(self.name, "Record is not a JSON object")
        record_id = item.get(self._pagination.id_key)
        if record_id is None or record_id == "":
            raise RemotePageError(self.name, f"Record without '{self._pagination.id_key}'")
        return RawRecord(
            id=str(record_id),
            raw=json.dumps(item, separators=(",", ":")).encode(),
        )
