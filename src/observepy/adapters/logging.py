"""Python logging handler adapter for observepy.

This adapter bridges Python's standard library logging module to an
observepy logger, so records from third-party libraries reach the same
console output and remote sink as application calls.
"""

import logging
from typing import Any

from observepy.core.models import Level
from observepy.core.normalize import expand_error

# Standard LogRecord attributes that should not be treated as extra fields
_STANDARD_LOGRECORD_ATTRS = frozenset(
    {
        "args",
        "asctime",
        "created",
        "exc_info",
        "exc_text",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "message",
        "module",
        "msecs",
        "msg",
        "name",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "taskName",
        "thread",
        "threadName",
    }
)


# Default attributes to extract from LogRecord
_DEFAULT_INCLUDE_ATTRS = ["module", "funcName", "lineno", "pathname"]

# Diagnostics of observepy itself must not be fed back into it.
_OWN_NAMESPACE = "observepy"


def level_for(levelno: int) -> Level:
    """Map a standard library level number to a Level."""
    if levelno >= logging.ERROR:
        return Level.ERROR
    if levelno >= logging.WARNING:
        return Level.WARN
    if levelno >= logging.INFO:
        return Level.INFO
    if levelno >= logging.DEBUG:
        return Level.DEBUG
    return Level.SILLY


class ObservepyHandler(logging.Handler):
    """Logging handler that forwards log records to an observepy logger.

    Example:
        ```python
        from observepy import create_logger
        from observepy.adapters.logging import ObservepyHandler

        logger = create_logger(service="api")
        logging.getLogger().addHandler(ObservepyHandler(logger))
        ```
    """

    def __init__(
        self,
        logger: Any,
        include_attrs: list[str] | None = None,
    ) -> None:
        """Initialize the handler with a target logger.

        Args:
            logger: A Logger or BoundLogger receiving the records.
            include_attrs: List of LogRecord attributes to include. Defaults to
                ["module", "funcName", "lineno", "pathname"].
        """
        super().__init__()
        self._logger = logger
        self._include_attrs = include_attrs or _DEFAULT_INCLUDE_ATTRS

    def emit(self, record: logging.LogRecord) -> None:
        """Forward a log record to the observepy logger.

        Args:
            record: The log record to emit.
        """
        if record.name == _OWN_NAMESPACE or record.name.startswith(_OWN_NAMESPACE + "."):
            return
        try:
            # Map of attribute names to their values from LogRecord
            attr_mapping: dict[str, str | int | float | bool] = {
                "module": record.name,
                "funcName": record.funcName or "",
                "lineno": record.lineno,
                "pathname": record.pathname,
            }

            # Build attributes based on include_attrs configuration
            fields: dict[str, Any] = {
                key: attr_mapping[key] for key in self._include_attrs if key in attr_mapping
            }

            # Add any extra attributes passed via logging call
            for key, value in record.__dict__.items():
                if key not in _STANDARD_LOGRECORD_ATTRS and isinstance(
                    value, (str, int, float, bool)
                ):
                    fields[key] = value

            if record.exc_info and record.exc_info[1] is not None:
                fields["error"] = expand_error(record.exc_info[1])

            level = level_for(record.levelno)
            method = getattr(self._logger, level.label)
            method(record.getMessage(), **fields)
        except Exception:
            self.handleError(record)
