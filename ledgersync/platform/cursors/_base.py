"""Base cursor class for persisted sync state."""

from pydantic import BaseModel, ConfigDict


class BaseCursor(BaseModel):
    """Base cursor class for persisted sync state.

    Leverages Pydantic's built-in serialization:
    - model_dump() for dict serialization
    - model_validate() for deserialization

    All cursor classes should inherit from this base class.
    """

    model_config = ConfigDict(
        # Allow extra fields for forward compatibility
        extra="allow",
        # Persisted payloads use camelCase aliases, code uses field names
        populate_by_name=True,
    )
