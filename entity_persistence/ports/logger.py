"""Logger port for persistence components."""

from abc import ABC, abstractmethod
from typing import Any


class LoggerPort(ABC):
    """Abstract interface for logging operations.

    Persistence components log through this port so that hosts can route
    load, store and remove diagnostics into their own logging setup.
    Keyword arguments carry structured context such as ``key`` or
    ``entity_type``.
    """

    @abstractmethod
    def debug(self, message: str, /, **kwargs: Any) -> None:
        """Log a debug message."""
        ...

    @abstractmethod
    def info(self, message: str, /, **kwargs: Any) -> None:
        """Log an info message."""
        ...

    @abstractmethod
    def warning(self, message: str, /, **kwargs: Any) -> None:
        """Log a warning message, e.g. a skipped corrupt record."""
        ...

    @abstractmethod
    def error(self, message: str, /, **kwargs: Any) -> None:
        """Log an error message, e.g. a failed store or remove."""
        ...

    @abstractmethod
    def exception(
        self, message: str, /, exc_info: Exception | None = None, **kwargs: Any
    ) -> None:
        """Log an exception with traceback."""
        ...
