"""Settings for ledgersync.

All defaults are defined here in the schema. Uses Pydantic Settings for
automatic env var loading:

    LEDGERSYNC_DEFAULT_PAGE_SIZE=50
    LEDGERSYNC_LOG_LEVEL=DEBUG
"""

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ledgersync.core.config.enums import Environment, LogLevel


class Settings(BaseSettings):
    """Process-wide configuration with automatic env var loading."""

    model_config = SettingsConfigDict(
        env_prefix="LEDGERSYNC_",
        env_file=".env",
        extra="ignore",
    )

    ENVIRONMENT: Environment = Field(Environment.LOCAL, description="Deployment environment")
    LOG_LEVEL: LogLevel = Field(LogLevel.INFO, description="Root log level")

    DEFAULT_PAGE_SIZE: int = Field(
        100, description="Page size used when a poll does not request one"
    )
    MAX_STEPS_PER_POLL: int = Field(
        50, description="Upper bound on advance steps drained by a single poll"
    )
    STATE_DIR: Path = Field(
        Path(".ledgersync/state"), description="Directory of the file timeline store"
    )
    HTTP_TIMEOUT_SECONDS: float = Field(
        20.0, description="Per-request timeout for the HTTP page source"
    )

    @field_validator("DEFAULT_PAGE_SIZE", "MAX_STEPS_PER_POLL")
    @classmethod
    def _positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("must be a positive integer")
        return value

    @field_validator("HTTP_TIMEOUT_SECONDS")
    @classmethod
    def _positive_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("must be positive")
        return value

    @property
    def json_logs(self) -> bool:
        """Whether log records are emitted as JSON lines."""
        return self.ENVIRONMENT != Environment.LOCAL
