"""Structured logging."""

import json
import logging
from datetime import datetime, timezone
from typing import Any

from connectviz.config.settings import Settings, get_settings

_NOISY_LOGGERS = ("asyncio", "plotly", "urllib3")


class JsonFormatter(logging.Formatter):
    """Render log records as single-line JSON objects."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def setup_logging(
    level: str | None = None,
    json_output: bool | None = None,
    silence_noisy_loggers: bool = True,
    *,
    settings: Settings | None = None,
) -> None:
    """Configure the root logger for applications embedding connectviz.

    ``level`` and ``json_output`` default to the ``log_level`` and ``log_json``
    settings.
    """
    if level is None or json_output is None:
        settings = settings or get_settings()
        level = settings.log_level if level is None else level
        json_output = settings.log_json if json_output is None else json_output

    handler = logging.StreamHandler()
    if json_output:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s")
        )

    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(level.upper())

    if silence_noisy_loggers:
        for name in _NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)


class StructuredLogger:
    """Structured logger for render events."""

    def __init__(self, name: str = __name__):
        """Initialize structured logger."""
        self.logger = logging.getLogger(name)

    def log_step(
        self,
        step: str,
        state: dict[str, Any],
        duration_ms: float | None = None,
    ) -> None:
        """Log a render step."""
        log_data: dict[str, Any] = {
            "step": step,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "state": state,
        }
        if duration_ms is not None:
            log_data["duration_ms"] = round(duration_ms, 3)

        self.logger.debug(json.dumps(log_data, default=str))

    def log_error(
        self,
        step: str,
        error: Exception,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Log an error with context."""
        log_data: dict[str, Any] = {
            "step": step,
            "error": str(error),
            "error_type": type(error).__name__,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        if context:
            log_data["context"] = context

        self.logger.warning(json.dumps(log_data, default=str), exc_info=error)
