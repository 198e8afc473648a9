"""Logging utilities for fieldstate consumers.

Provides a structured JSON logging option and a context-carrying logger
for hosts that want field and form names attached to every record.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Dict, Optional

if TYPE_CHECKING:
    from fieldstate.lib.settings import LoggingConfig
    from fieldstate.models.field_state import FieldState

__all__ = [
    "setup_logging",
    "configure_logging",
    "JSONFormatter",
    "FieldLogger",
    "get_field_logger",
]

_RESERVED_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__
) | {"message", "asctime"}


class JSONFormatter(logging.Formatter):
    """Formatter that outputs log records as JSON.

    Example output:
        {"timestamp": "2025-01-15T10:30:00.123Z", "level": "DEBUG",
         "logger": "fieldstate.models.field_state", "message": "Field touched"}
    """

    def __init__(
        self,
        include_fields: Optional[list[str]] = None,
        exclude_fields: Optional[list[str]] = None,
        include_source: bool = True,
    ):
        """Initialize JSON formatter.

        Args:
            include_fields: Extra fields to include (from record.__dict__)
            exclude_fields: Fields to exclude from output
            include_source: Whether to add file/line/function info
        """
        super().__init__()
        self.include_fields = include_fields or []
        self.exclude_fields = exclude_fields or []
        self.include_source = include_source

    def format(self, record: logging.LogRecord) -> str:
        """Format a log record as JSON."""
        log_data: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if self.include_source and record.pathname:
            log_data["source"] = {
                "file": record.pathname,
                "line": record.lineno,
                "function": record.funcName,
            }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for field in self.include_fields:
            if hasattr(record, field):
                log_data[field] = getattr(record, field)

        # Attributes set via extra=
        extra_attrs = {
            k: v
            for k, v in record.__dict__.items()
            if k not in _RESERVED_ATTRS and k not in self.exclude_fields
        }
        if extra_attrs:
            log_data["extra"] = extra_attrs

        return json.dumps(log_data, default=str)


class FieldLogger:
    """Logger wrapper that attaches form and field context to every record.

    Field values are never attached; they may be passwords.

    Example:
        logger = get_field_logger(__name__, form="login")
        logger.for_field(username).info("Focus lost")  # field="username"
        logger.log_field("Field blocked submission", password)
    """

    def __init__(self, name: str):
        self._logger = logging.getLogger(name)
        self._context: Dict[str, Any] = {}

    @property
    def name(self) -> str:
        return self._logger.name

    @property
    def context(self) -> Dict[str, Any]:
        return dict(self._context)

    def set_context(self, **kwargs: Any) -> None:
        """Set context fields included in all subsequent log messages."""
        self._context.update(kwargs)

    def clear_context(self) -> None:
        self._context.clear()

    def bind(self, **kwargs: Any) -> "FieldLogger":
        """Return a new logger with this context plus ``kwargs``."""
        bound = FieldLogger(self.name)
        bound._context = {**self._context, **kwargs}
        return bound

    def for_field(self, field_state: "FieldState[Any]") -> "FieldLogger":
        """Return a logger whose records carry ``field=field_state.name``."""
        return self.bind(field=field_state.name)

    def log_field(
        self,
        msg: str,
        field_state: "FieldState[Any]",
        *args: Any,
        level: int = logging.INFO,
        **kwargs: Any,
    ) -> None:
        """Log ``msg`` with the field's name, flags and failed validators.

        Works with anything exposing ``name`` and ``read()``, including
        SynchronizedField.
        """
        snapshot = field_state.read()
        extra = kwargs.pop("extra", {})
        extra.update(
            field=field_state.name,
            dirty=snapshot.dirty,
            touched=snapshot.touched,
            valid=snapshot.valid,
            failed=[name for name, passed in snapshot.validation.items() if not passed],
        )
        self._log(level, msg, *args, extra=extra, **kwargs)

    def _log(self, level: int, msg: str, *args: Any, **kwargs: Any) -> None:
        extra = kwargs.pop("extra", {})
        extra.update(self._context)
        self._logger.log(level, msg, *args, extra=extra, **kwargs)

    def debug(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._log(logging.DEBUG, msg, *args, **kwargs)

    def info(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._log(logging.INFO, msg, *args, **kwargs)

    def warning(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._log(logging.WARNING, msg, *args, **kwargs)

    def error(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._log(logging.ERROR, msg, *args, **kwargs)

    def exception(self, msg: str, *args: Any, **kwargs: Any) -> None:
        """Log an exception with traceback."""
        kwargs["exc_info"] = True
        self._log(logging.ERROR, msg, *args, **kwargs)


def get_field_logger(name: str, **context: Any) -> FieldLogger:
    """Get a context-carrying logger.

    Args:
        name: Logger name (typically module path)
        **context: Initial context fields

    Returns:
        FieldLogger instance
    """
    field_logger = FieldLogger(name)
    if context:
        field_logger.set_context(**context)
    return field_logger


def setup_logging(
    verbose: bool = False,
    json_format: bool = False,
    log_file: Optional[str] = None,
    console: bool = True,
    level: Optional[int] = None,
) -> None:
    """Configure the root logger.

    Args:
        verbose: Enable debug-level logging
        json_format: Use JSON output format (for log aggregation)
        log_file: Optional file path to write logs to
        console: Whether to log to stdout
        level: Explicit level, overrides ``verbose``
    """
    if level is None:
        level = logging.DEBUG if verbose else logging.INFO

    if json_format:
        formatter: logging.Formatter = JSONFormatter()
    else:
        formatter = logging.Formatter(
            "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Remove existing handlers to avoid duplicates
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    if console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)


def configure_logging(config: "LoggingConfig") -> None:
    """Apply a validated LoggingConfig."""
    setup_logging(
        json_format=config.format == "json",
        log_file=config.file,
        console=config.console,
        level=logging.getLevelName(config.level),
    )
