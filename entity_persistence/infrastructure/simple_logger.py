"""Simple logger implementation over the standard logging module."""

import logging
from typing import Any

from ..ports.logger import LoggerPort

# Attributes LogRecord reserves; passing them through ``extra`` raises KeyError
_RESERVED_RECORD_KEYS = frozenset(
    logging.LogRecord("", 0, "", 0, "", None, None).__dict__.keys() | {"message", "asctime"}
)


class SimpleLogger(LoggerPort):
    """Logger implementation using Python's standard logging.

    Structured keyword context is attached to each record through ``extra``.
    Keys that collide with LogRecord attributes are prefixed with ``ctx_``.
    """

    def __init__(self, name: str = "entity_persistence", level: int = logging.INFO):
        """Initialize the logger.

        Args:
            name: Logger name (default: "entity_persistence")
            level: Logging level (default: INFO)
        """
        self._logger = logging.getLogger(name)
        self._logger.setLevel(level)

        # Add console handler if not already present
        if not self._logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
            handler.setFormatter(formatter)
            self._logger.addHandler(handler)

    @staticmethod
    def _extra(kwargs: dict[str, Any]) -> dict[str, Any]:
        return {
            (f"ctx_{key}" if key in _RESERVED_RECORD_KEYS else key): value
            for key, value in kwargs.items()
        }

    def debug(self, message: str, /, **kwargs: Any) -> None:
        """Log a debug message."""
        self._logger.debug(message, extra=self._extra(kwargs))

    def info(self, message: str, /, **kwargs: Any) -> None:
        """Log an info message."""
        self._logger.info(message, extra=self._extra(kwargs))

    def warning(self, message: str, /, **kwargs: Any) -> None:
        """Log a warning message."""
        self._logger.warning(message, extra=self._extra(kwargs))

    def error(self, message: str, /, **kwargs: Any) -> None:
        """Log an error message."""
        self._logger.error(message, extra=self._extra(kwargs))

    def exception(
        self, message: str, /, exc_info: Exception | None = None, **kwargs: Any
    ) -> None:
        """Log an exception with traceback."""
        self._logger.error(message, exc_info=exc_info or True, extra=self._extra(kwargs))
