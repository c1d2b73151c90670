"""Type definitions and protocols for handlers and callbacks.

This module provides Protocol classes and type aliases used at the seams
between the entity collection, the lifecycle service and the storage layer.
"""

from collections.abc import Callable
from typing import Any, Protocol

from .events import EntitiesLoadedEvent
from .models import OperationResult


class EntityChangedHandler(Protocol):
    """Protocol for entity collection notification handlers.

    Handlers receive the key of the updated or removed entity. They are
    called synchronously by the notification source and must not block.
    """

    def __call__(self, key: str) -> None:
        """Handle a notification.

        Args:
            key: The key of the entity that changed
        """
        ...


class RecordConverter(Protocol):
    """Protocol for mapping in-memory payloads to stored records and back."""

    def to_record(self, data: Any) -> Any:
        """Convert an entity payload to its serialized record type."""
        ...

    def from_record(self, record: Any) -> Any:
        """Convert a stored record back to an entity payload."""
        ...


# Type aliases for common patterns
ValidationFn = Callable[[Any], bool]
"""Record validation predicate: (record) -> bool. False rejects the record on load."""

LoadCompleteHandler = Callable[[EntitiesLoadedEvent], None]
"""Load-complete listener: (event) -> None"""

OperationResultCallback = Callable[[OperationResult], None]
"""Receives the outcome of each incremental store/remove"""

Unsubscribe = Callable[[], None]
"""Returned by subscribe calls; removes the subscription when called"""
