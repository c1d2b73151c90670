"""Entity store port - the live entity collection the persistence layer mirrors."""

from abc import ABC, abstractmethod
from typing import Any

from ..domain.models import Entity, ResolvedMultiple
from ..domain.types import EntityChangedHandler, Unsubscribe


class EntityStorePort(ABC):
    """Abstract interface for an in-memory entity collection.

    The collection owns entity identity and lifecycle. The persistence layer
    reads entities, listens to change notifications and publishes loaded
    batches through this port.
    """

    @abstractmethod
    def get_entity(self, key: str) -> Entity[Any] | None:
        """Look up an entity.

        Args:
            key: The entity key

        Returns:
            The entity if found, None otherwise
        """
        ...

    @abstractmethod
    def subscribe_updated(self, handler: EntityChangedHandler) -> Unsubscribe:
        """Register a handler for entity created/updated notifications.

        Args:
            handler: Called with the key of each updated entity

        Returns:
            Callable that removes the subscription
        """
        ...

    @abstractmethod
    def subscribe_removed(self, handler: EntityChangedHandler) -> Unsubscribe:
        """Register a handler for entity removed notifications.

        Args:
            handler: Called with the key of each removed entity

        Returns:
            Callable that removes the subscription
        """
        ...

    @abstractmethod
    def resolved_multiple(self, batch: ResolvedMultiple) -> None:
        """Mark every entity in the batch resolved, as a single atomic update.

        Args:
            batch: The loaded (key, payload) pairs
        """
        ...
