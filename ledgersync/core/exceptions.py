"""Shared exceptions module."""

from typing import Optional

from pydantic import ValidationError


class LedgerSyncException(Exception):
    """Base exception for ledgersync."""

    pass


class InvalidPageSizeError(LedgerSyncException, ValueError):
    """Exception raised when a step is requested with a non-positive page size."""

    def __init__(self, page_size: object):
        """Create a new InvalidPageSizeError instance.

        Args:
        ----
            page_size (object): The rejected page size.

        """
        self.page_size = page_size
        self.message = f"Page size must be a positive integer, got {page_size!r}"
        super().__init__(self.message)


class TimelineCorruptError(LedgerSyncException):
    """Exception raised when a persisted timeline cannot be parsed or is inconsistent.

    A corrupt timeline is never replaced by a fresh one: resetting would either
    skip history or deliver it twice.
    """

    def __init__(self, message: Optional[str] = "Persisted timeline is corrupt"):
        """Create a new TimelineCorruptError instance.

        Args:
        ----
            message (str, optional): The error message. Has default message.

        """
        self.message = message
        super().__init__(self.message)

    @classmethod
    def from_validation_error(cls, error: ValidationError) -> "TimelineCorruptError":
        """Build the error from a pydantic validation failure."""
        details = "; ".join(
            f"{'.'.join(str(loc) for loc in item['loc']) or 'timeline'}: {item['msg']}"
            for item in error.errors()
        )
        return cls(f"Persisted timeline is corrupt: {details}")


class RemotePageError(LedgerSyncException):
    """Exception raised when a remote listing returns a page that cannot be interpreted."""

    def __init__(self, source_name: str, message: Optional[str] = "Malformed page"):
        """Create a new RemotePageError instance.

        Args:
        ----
            source_name (str): The name of the remote listing.
            message (str, optional): The error message. Has default message.

        """
        self.source_name = source_name
        self.message = message
        super().__init__(f"{source_name}: {message}")


class UnknownStreamError(LedgerSyncException, KeyError):
    """Exception raised when a multi-stream state names a stream with no engine."""

    def __init__(self, stream: str):
        """Create a new UnknownStreamError instance.

        Args:
        ----
            stream (str): The stream name without a registered engine.

        """
        self.stream = stream
        self.message = f"No engine registered for stream '{stream}'"
        super().__init__(self.message)

    def __str__(self) -> str:
        """Return the message rather than KeyError's quoted repr."""
        return self.message


class InvalidStepLimitError(LedgerSyncException, ValueError):
    """Exception raised when a poll is configured with a non-positive step budget."""

    def __init__(self, max_steps: object):
        """Create a new InvalidStepLimitError instance.

        Args:
        ----
            max_steps (object): The rejected step budget.

        """
        self.max_steps = max_steps
        self.message = f"Steps per poll must be a positive integer, got {max_steps!r}"
        super().__init__(self.message)
