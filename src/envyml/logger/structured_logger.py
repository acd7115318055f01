"""
Structured logger with text or JSON output.

Wraps a standard library logger; keyword context passed to the log methods
ends up as extra record attributes and is rendered by the formatters below.
"""

import json
import logging
import sys
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from .interface import Logger

# Attributes every LogRecord already has; anything else came from kwargs.
RESERVED_RECORD_KEYS = frozenset(
    {
        "args", "asctime", "created", "exc_info", "exc_text", "filename",
        "funcName", "levelname", "levelno", "lineno", "module",
        "msecs", "message", "msg", "name", "pathname", "process",
        "processName", "relativeCreated", "stack_info", "thread",
        "threadName", "taskName",
    }
)

TEXT_FORMAT = "%(asctime)s [%(levelname)s] [%(name)s] [session:%(session_id)s] %(message)s"


def _extra_fields(record: logging.LogRecord) -> Dict[str, Any]:
    return {
        key: value
        for key, value in record.__dict__.items()
        if key not in RESERVED_RECORD_KEYS and key != "session_id"
    }


class JsonFormatter(logging.Formatter):
    """Render records as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = dict(
            timestamp=datetime.now(timezone.utc).isoformat(),
            level=record.levelname,
            logger=record.name,
            message=record.getMessage(),
        )
        if getattr(record, "session_id", None):
            entry["session_id"] = str(record.session_id)  # type: ignore[attr-defined]
        entry.update(_extra_fields(record))
        return json.dumps(entry, default=str)


class TextFormatter(logging.Formatter):
    """Human-readable format with context appended as ``key=value`` pairs."""

    def __init__(self, fmt: str = TEXT_FORMAT) -> None:
        super().__init__(fmt)

    def format(self, record: logging.LogRecord) -> str:
        context = " ".join(f"{key}={value}" for key, value in _extra_fields(record).items())
        line = super().format(record)
        return f"{line} {context}" if context else line


def _build_handlers(formatter: logging.Formatter, log_file: Optional[str]) -> List[logging.Handler]:
    # stdout is reserved for programs whose environment envyml populates
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


class StructuredLogger(Logger):
    """Logger writing to stderr (and optionally a file) in text or JSON.

    Creating a second instance with the same name replaces the handlers of
    the first one instead of duplicating output.

    Example:
        logger = StructuredLogger(name="envyml")
        logger.info("Document loaded", path="env.yml", variables=12)
    """

    def __init__(
        self,
        name: str = "envyml",
        level: int = logging.INFO,
        log_file: Optional[str] = None,
        json_format: bool = False,
    ):
        self._name = name
        self._session_id = uuid.uuid4().hex[:8]

        formatter = JsonFormatter() if json_format else TextFormatter()
        self._logger = logging.getLogger(name)
        self._logger.setLevel(level)
        self._logger.propagate = False
        self._logger.handlers = _build_handlers(formatter, log_file)

    @property
    def name(self) -> str:
        return self._name

    def get_session_id(self) -> str:
        return self._session_id

    def _log(self, level: int, message: str, **kwargs: Any) -> None:
        if not self._logger.isEnabledFor(level):
            return
        extra: Dict[str, Any] = {"session_id": self._session_id}
        for key, value in kwargs.items():
            # LogRecord refuses to overwrite its own attributes
            extra[f"_{key}" if key in RESERVED_RECORD_KEYS else key] = value
        self._logger.log(level, message, extra=extra)

    def debug(self, message: str, **kwargs: Any) -> None:
        self._log(logging.DEBUG, message, **kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        self._log(logging.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self._log(logging.WARNING, message, **kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        self._log(logging.ERROR, message, **kwargs)

    def critical(self, message: str, **kwargs: Any) -> None:
        self._log(logging.CRITICAL, message, **kwargs)
