"""Contextual logging for ledgersync.

Wraps the standard library logger in a ``LoggerAdapter`` that carries a
dimension dict (target, stream, phase, ...) through every record:

    from ledgersync.core.logging import logger

    poll_logger = logger.with_context(target="acct_123")
    poll_logger.info("Advanced timeline")

Local environments get a human-readable line; everything else gets one JSON
object per line so log shippers can index the dimensions.
"""

import json
import logging
import sys
from typing import Any, MutableMapping, Optional

from ledgersync.core.config import settings

_RESERVED = set(vars(logging.makeLogRecord({})).keys()) | {"message", "asctime"}


class JsonFormatter(logging.Formatter):
    """Render a record and its context dimensions as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": self.formatTime(record, "%Y-%m-%dT%H:%M:%S%z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, value in record.__dict__.items():
            if key not in _RESERVED and not key.startswith("_"):
                payload[key] = value
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class ContextualLogger(logging.LoggerAdapter):
    """Logger adapter that merges bound dimensions into each record's ``extra``."""

    def __init__(
        self,
        base_logger: logging.Logger,
        dimensions: Optional[dict[str, Any]] = None,
        prefix: str = "",
    ) -> None:
        super().__init__(base_logger, dimensions or {})
        self.dimensions: dict[str, Any] = dict(dimensions or {})
        self.prefix = prefix

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> tuple[Any, Any]:
        extra = {**self.dimensions, **(kwargs.get("extra") or {})}
        kwargs["extra"] = extra
        if self.prefix:
            msg = f"{self.prefix}{msg}"
        return msg, kwargs

    def with_context(self, **dimensions: Any) -> "ContextualLogger":
        """Return a child logger with extra bound dimensions."""
        return ContextualLogger(
            self.logger, {**self.dimensions, **dimensions}, prefix=self.prefix
        )

    def with_prefix(self, prefix: str) -> "ContextualLogger":
        """Return a child logger that prepends ``prefix`` to every message."""
        return ContextualLogger(self.logger, self.dimensions, prefix=f"{self.prefix}{prefix}")


def _build_base_logger() -> logging.Logger:
    base = logging.getLogger("ledgersync")
    base.setLevel(settings.LOG_LEVEL.value)
    if not base.handlers:
        handler = logging.StreamHandler(sys.stdout)
        if settings.json_logs:
            handler.setFormatter(JsonFormatter())
        else:
            handler.setFormatter(
                logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
            )
        base.addHandler(handler)
    return base


logger = ContextualLogger(_build_base_logger())
