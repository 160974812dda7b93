"""Configuration module for ledgersync.

Provides centralized configuration management with type-safe enums.

Usage:
    from ledgersync.core.config import settings, Environment

    # Access settings
    page_size = settings.DEFAULT_PAGE_SIZE

    # Use enums for type safety
    if settings.ENVIRONMENT == Environment.PRD:
        ...
"""

from ledgersync.core.config.enums import Environment, LogLevel
from ledgersync.core.config.settings import Settings

__all__ = [
    "Settings",
    "Environment",
    "LogLevel",
    "settings",
]

# Singleton settings instance
settings = Settings()
