"""Typed cursor schemas for persisted sync state.

Each cursor schema is a Pydantic model that defines the structure
of the state a caller persists between polls.
"""

from ._base import BaseCursor
from .timeline import Timeline
from .timeline_set import TimelineSet

__all__ = [
    "BaseCursor",
    "Timeline",
    "TimelineSet",
]
