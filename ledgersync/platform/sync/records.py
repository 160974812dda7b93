"""Value types exchanged between the timeline engine and page sources."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from ledgersync.platform.cursors.timeline import Timeline


class RawRecord(BaseModel):
    """A remote record as the engine sees it: an identifier plus opaque bytes.

    The engine never looks past ``id``; decoding ``raw`` is the record
    mapper's business.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="Remote identifier of the record")
    raw: bytes = Field(default=b"", description="Undecoded vendor payload")


class Page(BaseModel):
    """One response from a remote listing.

    ``records`` are newest-first. For backward listings ``has_more`` means
    older records exist beyond this page; for anchor-bounded listings it means
    still newer records exist.
    """

    model_config = ConfigDict(frozen=True)

    records: list[RawRecord] = Field(default_factory=list)
    next_cursor: Optional[str] = None
    has_more: bool = False


class SyncPhase(str, Enum):
    """Which part of the algorithm a step ran."""

    BOOTSTRAP = "bootstrap"
    UNWIND = "unwind"
    STEADY = "steady"


@dataclass(frozen=True)
class AdvanceResult:
    """Outcome of one engine step.

    Attributes:
        records: Batch to deliver, oldest first.
        timeline: State to persist and pass to the next step.
        has_more: Whether another step would make progress right away.
        phase: Phase the step ran in, derived from the input timeline.
    """

    records: list[RawRecord] = field(default_factory=list)
    timeline: Timeline = field(default_factory=Timeline)
    has_more: bool = False
    phase: SyncPhase = SyncPhase.BOOTSTRAP
