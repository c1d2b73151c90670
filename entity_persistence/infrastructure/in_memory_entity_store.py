"""In-memory implementation of the EntityStorePort.

Reference entity collection for testing and development. Hosts normally
bring their own collection and adapt it to the port.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import UTC, datetime
from typing import Any

from ..domain.enums import ResolveStatus
from ..domain.models import Entity, ResolvedMultiple
from ..domain.types import EntityChangedHandler, Unsubscribe
from ..ports.entity_store import EntityStorePort
from ..ports.logger import LoggerPort
from .simple_logger import SimpleLogger


class InMemoryEntityStore(EntityStorePort):
    """Dictionary-backed entity collection with change notifications.

    Notifications are delivered synchronously, in subscription order. A
    failing handler is logged and does not stop delivery to the others.
    """

    def __init__(self, logger: LoggerPort | None = None) -> None:
        self._entities: dict[str, Entity[Any]] = {}
        self._updated_handlers: list[EntityChangedHandler] = []
        self._removed_handlers: list[EntityChangedHandler] = []
        self._logger = logger or SimpleLogger("entity_persistence.entity_store")

    # EntityStorePort
    def get_entity(self, key: str) -> Entity[Any] | None:
        return self._entities.get(key)

    def subscribe_updated(self, handler: EntityChangedHandler) -> Unsubscribe:
        return self._subscribe(self._updated_handlers, handler)

    def subscribe_removed(self, handler: EntityChangedHandler) -> Unsubscribe:
        return self._subscribe(self._removed_handlers, handler)

    def resolved_multiple(self, batch: ResolvedMultiple) -> None:
        """Apply the whole batch, then notify once per key."""
        now = datetime.now(UTC)
        for entry in batch.entities:
            self._entities[entry.key] = Entity(
                key=entry.key, status=ResolveStatus.RESOLVED, data=entry.data, timestamp=now
            )
        self._notify(self._updated_handlers, batch.keys())

    # Mutations
    def put(self, key: str, data: Any) -> Entity[Any]:
        """Resolve an entity with new data and notify subscribers."""
        entity = Entity(key=key, status=ResolveStatus.RESOLVED, data=data)
        self._entities[key] = entity
        self._notify(self._updated_handlers, [key])
        return entity

    def begin_resolve(self, key: str) -> Entity[Any]:
        """Register a key whose data is still being resolved."""
        entity = Entity(key=key, status=ResolveStatus.UNRESOLVED)
        self._entities[key] = entity
        self._notify(self._updated_handlers, [key])
        return entity

    def mark_failed(self, key: str) -> Entity[Any]:
        """Mark an entity's resolution as failed, keeping any previous data."""
        previous = self._entities.get(key)
        entity = Entity(
            key=key,
            status=ResolveStatus.FAILED,
            data=previous.data if previous else None,
        )
        self._entities[key] = entity
        self._notify(self._updated_handlers, [key])
        return entity

    def remove(self, key: str) -> bool:
        """Remove an entity. Returns False (and notifies nobody) if absent."""
        if self._entities.pop(key, None) is None:
            return False
        self._notify(self._removed_handlers, [key])
        return True

    # Introspection
    def keys(self) -> list[str]:
        return list(self._entities)

    def snapshot(self) -> dict[str, Any]:
        """Get the payload of every resolved entity."""
        return {key: e.data for key, e in self._entities.items() if e.has_resolved}

    def __len__(self) -> int:
        return len(self._entities)

    def _subscribe(
        self, handlers: list[EntityChangedHandler], handler: EntityChangedHandler
    ) -> Unsubscribe:
        handlers.append(handler)

        def unsubscribe() -> None:
            if handler in handlers:
                handlers.remove(handler)

        return unsubscribe

    def _notify(self, handlers: list[EntityChangedHandler], keys: Iterable[str]) -> None:
        for key in keys:
            for handler in list(handlers):
                try:
                    handler(key)
                except Exception as e:
                    self._logger.exception(
                        f"Entity notification handler failed for '{key}'", exc_info=e, key=key
                    )
