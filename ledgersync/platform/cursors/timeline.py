"""Timeline cursor for reverse-paginated, anchor-less listings."""

import json
from typing import Any, Optional, Union

from pydantic import ConfigDict, Field, ValidationError, field_validator, model_validator

from ledgersync.core.exceptions import TimelineCorruptError

from ._base import BaseCursor

# Keys written by connectors that only tracked the newest delivered id.
LEGACY_ANCHOR_KEYS = ("lastIDCreated", "lastSeenID")


class Timeline(BaseCursor):
    """Persisted synchronization cursor for one remote listing.

    Two regimes exist. While bootstrapping (``found_oldest`` false) the engine
    walks backward through history and pushes each hop's cursor onto
    ``backlog_cursors`` so an interrupted scan resumes where it stopped. In
    steady state (``found_oldest`` true) only ``anchor_id`` matters: the newest
    record already delivered.

    The zero value means "start bootstrapping from the newest page". Instances
    are frozen; transitions build a new Timeline via ``evolve``.

    Serialized form (camelCase, absent fields mean "not established yet"):

        {"anchorID": "tx_42", "backlogCursors": [], "foundOldest": true}
    """

    model_config = ConfigDict(frozen=True)

    anchor_id: Optional[str] = Field(
        default=None,
        alias="anchorID",
        description="Identifier of the newest record already delivered",
    )
    backlog_cursors: list[str] = Field(
        default_factory=list,
        alias="backlogCursors",
        description="Cursors collected while scanning backward; last element is the top",
    )
    found_oldest: bool = Field(
        default=False,
        alias="foundOldest",
        description="Whether the oldest record was located and the backlog unwound",
    )

    @model_validator(mode="before")
    @classmethod
    def _normalize(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)

        legacy_anchor = None
        for key in LEGACY_ANCHOR_KEYS:
            value = data.pop(key, None)
            if value and legacy_anchor is None:
                legacy_anchor = value

        anchor = data.get("anchorID", data.get("anchor_id"))
        backlog = data.get("backlogCursors", data.get("backlog_cursors"))

        if not anchor and legacy_anchor:
            data.pop("anchor_id", None)
            data["anchorID"] = anchor = legacy_anchor

        # An anchor with nothing left to unwind is steady state, whatever the flag says.
        if anchor and not backlog:
            data.pop("found_oldest", None)
            data["foundOldest"] = True

        return data

    @field_validator("anchor_id", mode="before")
    @classmethod
    def _empty_anchor_is_absent(cls, value: Any) -> Any:
        if value == "":
            return None
        return value

    @field_validator("backlog_cursors", mode="before")
    @classmethod
    def _null_backlog_is_empty(cls, value: Any) -> Any:
        if value is None:
            return []
        return value

    @field_validator("backlog_cursors")
    @classmethod
    def _cursors_are_tokens(cls, value: list[str]) -> list[str]:
        if any(not cursor for cursor in value):
            raise ValueError("backlog cursors must be non-empty tokens")
        return value

    @model_validator(mode="after")
    def _check_regime(self) -> "Timeline":
        if self.found_oldest and self.backlog_cursors:
            raise ValueError("foundOldest is set but the backlog was never unwound")
        return self

    # ------------------------------------------------------------------
    # Regime helpers
    # ------------------------------------------------------------------

    @property
    def is_bootstrapping(self) -> bool:
        """Whether the backward scan is still in progress."""
        return not self.found_oldest

    @property
    def has_provisional_anchor(self) -> bool:
        """Whether the oldest record was found but the backlog is still unwinding."""
        return self.is_bootstrapping and self.anchor_id is not None

    @property
    def top_cursor(self) -> Optional[str]:
        """Cursor the next backward fetch resumes from (None = newest page)."""
        return self.backlog_cursors[-1] if self.backlog_cursors else None

    def evolve(self, **changes: Any) -> "Timeline":
        """Return a validated copy with ``changes`` applied (field names, not aliases)."""
        return type(self).model_validate({**self.model_dump(), **changes})

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the persisted camelCase form."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    def to_json(self) -> str:
        """Serialize to compact JSON text."""
        return json.dumps(self.to_dict(), separators=(",", ":"))

    @classmethod
    def load(cls, payload: Union[str, bytes, dict, None]) -> "Timeline":
        """Parse a persisted timeline.

        ``None`` and empty payloads yield a fresh timeline. Anything that fails
        to parse or violates the regime invariants raises TimelineCorruptError.
        """
        if payload is None:
            return cls()
        if isinstance(payload, (str, bytes)):
            if not payload.strip():
                return cls()
            try:
                payload = json.loads(payload)
            except (json.JSONDecodeError, UnicodeDecodeError) as e:
                raise TimelineCorruptError(f"Persisted timeline is not valid JSON: {e}") from e
        if not isinstance(payload, dict):
            raise TimelineCorruptError(
                f"Persisted timeline must be a JSON object, got {type(payload).__name__}"
            )
        try:
            return cls.model_validate(payload)
        except ValidationError as e:
            raise TimelineCorruptError.from_validation_error(e) from e
