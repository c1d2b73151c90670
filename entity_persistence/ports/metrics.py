"""Metrics port - Abstract interface for persistence metrics.

Lets the lifecycle service and storage adapters count loads, writes and
failures without depending on a specific metrics backend.
"""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from typing import Any


class MetricsPort(ABC):
    """Abstract interface for metrics collection."""

    @abstractmethod
    def increment(self, name: str, value: int = 1) -> None:
        """Increment a counter metric.

        Args:
            name: The metric name (e.g., "persistence.store.success")
            value: The increment value (default: 1)
        """
        ...

    @abstractmethod
    def gauge(self, name: str, value: float) -> None:
        """Set a gauge metric.

        Args:
            name: The metric name (e.g., "persistence.pending_keys")
            value: The gauge value
        """
        ...

    @abstractmethod
    def record(self, name: str, value: float) -> None:
        """Record a value for summary statistics.

        Args:
            name: The metric name (e.g., "persistence.load.duration_ms")
            value: The value to record
        """
        ...

    @abstractmethod
    def timer(self, name: str) -> AbstractContextManager[Any]:
        """Create a context manager for timing operations.

        Args:
            name: The metric name for the timer

        Returns:
            A context manager that records the operation duration
        """
        ...
