"""Protocols for turning raw records into domain objects and handing them off."""

from typing import Any, Protocol, Sequence, runtime_checkable

from ledgersync.platform.sync.records import RawRecord


@runtime_checkable
class RecordMapper(Protocol):
    """Converts a raw vendor record into the caller's normalized object."""

    def map(self, record: RawRecord) -> Any:
        """Map a single record. Raising aborts the poll step before state is saved."""
        ...


@runtime_checkable
class RecordSink(Protocol):
    """Receives each chronological batch produced by a poll step.

    The timeline is persisted only after ``write`` returns, so a failing
    sink sees the same batch again on the next poll (at-least-once).
    """

    async def write(self, target: str, items: Sequence[Any]) -> None:
        """Accept one batch for ``target``, oldest first."""
        ...
