"""Load-complete notifications, used to gate on "local cache is ready"."""

from __future__ import annotations

import asyncio
from collections import defaultdict

from ..domain.events import EntitiesLoadedEvent
from ..domain.types import LoadCompleteHandler, Unsubscribe
from ..infrastructure.simple_logger import SimpleLogger
from ..ports.logger import LoggerPort


class PersistenceNotifications:
    """Fires one EntitiesLoadedEvent per entity type.

    A handler subscribed after the event has fired is called immediately with
    the recorded event, so late subscribers cannot miss it.
    """

    def __init__(self, logger: LoggerPort | None = None) -> None:
        self._logger = logger or SimpleLogger("entity_persistence.notifications")
        self._handlers: dict[str, list[LoadCompleteHandler]] = defaultdict(list)
        self._loaded: dict[str, EntitiesLoadedEvent] = {}
        self._waiters: dict[str, asyncio.Event] = {}

    def subscribe(self, entity_type: str, handler: LoadCompleteHandler) -> Unsubscribe:
        """Register a load-complete handler for an entity type.

        Args:
            entity_type: The entity type to watch
            handler: Called with the EntitiesLoadedEvent

        Returns:
            Callable that removes the subscription
        """
        handlers = self._handlers[entity_type]
        handlers.append(handler)

        def unsubscribe() -> None:
            if handler in handlers:
                handlers.remove(handler)

        event = self._loaded.get(entity_type)
        if event is not None:
            self._dispatch(handler, event)
        return unsubscribe

    def load_done(self, event: EntitiesLoadedEvent) -> bool:
        """Record and dispatch the load-complete event for its entity type.

        Returns:
            False if the entity type had already been reported loaded
        """
        if event.entity_type in self._loaded:
            self._logger.warning(
                "Load already reported for entity type, ignoring",
                entity_type=event.entity_type,
            )
            return False

        self._loaded[event.entity_type] = event
        for handler in list(self._handlers[event.entity_type]):
            self._dispatch(handler, event)

        waiter = self._waiters.pop(event.entity_type, None)
        if waiter is not None:
            waiter.set()
        return True

    def is_loaded(self, entity_type: str) -> bool:
        return entity_type in self._loaded

    def loaded_event(self, entity_type: str) -> EntitiesLoadedEvent | None:
        return self._loaded.get(entity_type)

    async def wait_loaded(self, entity_type: str) -> EntitiesLoadedEvent:
        """Wait until the entity type has finished its initial load."""
        event = self._loaded.get(entity_type)
        if event is not None:
            return event
        waiter = self._waiters.setdefault(entity_type, asyncio.Event())
        await waiter.wait()
        return self._loaded[entity_type]

    def _dispatch(self, handler: LoadCompleteHandler, event: EntitiesLoadedEvent) -> None:
        try:
            handler(event)
        except Exception as e:
            self._logger.exception(
                "Load-complete handler failed", exc_info=e, entity_type=event.entity_type
            )
