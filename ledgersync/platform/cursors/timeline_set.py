"""Cursor holding several named timelines under one persisted state."""

import json
from typing import Any, Union

from pydantic import ConfigDict, Field, ValidationError

from ledgersync.core.exceptions import TimelineCorruptError

from ._base import BaseCursor
from .timeline import Timeline


class TimelineSet(BaseCursor):
    """Named timelines persisted together.

    Connectors that list one resource through several filtered endpoints
    (for example one listing per transfer status) keep a timeline per
    stream but persist them as one state blob. Streams missing from the set
    start from a fresh timeline.
    """

    model_config = ConfigDict(frozen=True)

    timelines: dict[str, Timeline] = Field(
        default_factory=dict, description="Timeline per stream name"
    )

    def get(self, stream: str) -> Timeline:
        """Return the stream's timeline, or a fresh one if it was never advanced."""
        return self.timelines.get(stream) or Timeline()

    def with_timelines(self, updates: dict[str, Timeline]) -> "TimelineSet":
        """Return a copy with ``updates`` replacing the named streams."""
        return type(self).model_validate(
            {**self.model_dump(exclude={"timelines"}), "timelines": {**self.timelines, **updates}}
        )

    @property
    def all_caught_up(self) -> bool:
        """Whether every stored stream reached steady state."""
        return all(t.found_oldest for t in self.timelines.values())

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the persisted camelCase form."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    def to_json(self) -> str:
        """Serialize to compact JSON text."""
        return json.dumps(self.to_dict(), separators=(",", ":"))

    @classmethod
    def load(cls, payload: Union[str, bytes, dict, None]) -> "TimelineSet":
        """Parse a persisted set; corrupt payloads raise TimelineCorruptError."""
        if payload is None:
            return cls()
        if isinstance(payload, (str, bytes)):
            if not payload.strip():
                return cls()
            try:
                payload = json.loads(payload)
            except (json.JSONDecodeError, UnicodeDecodeError) as e:
                raise TimelineCorruptError(f"Persisted timeline set is not valid JSON: {e}") from e
        if not isinstance(payload, dict):
            raise TimelineCorruptError(
                f"Persisted timeline set must be a JSON object, got {type(payload).__name__}"
            )
        try:
            return cls.model_validate(payload)
        except ValidationError as e:
            raise TimelineCorruptError.from_validation_error(e) from e
