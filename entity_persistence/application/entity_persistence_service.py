"""Entity persistence service - keeps an entity collection mirrored to storage."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from pathlib import Path
from typing import Any

from ..domain.enums import LifecycleState, PersistenceOperation
from ..domain.events import EntitiesLoadedEvent
from ..domain.exceptions import LifecycleError, NotLoadedError
from ..domain.models import ResolvedMultiple, ResolveResult, ResolveSucceeded
from ..domain.types import (
    OperationResultCallback,
    RecordConverter,
    Unsubscribe,
    ValidationFn,
)
from ..infrastructure.config import LogContext, PersistenceConfig
from ..infrastructure.fs_directory_persistence import FSDirectoryPersistence
from ..infrastructure.in_memory_metrics import InMemoryMetrics
from ..infrastructure.serialization import SerializationFactory
from ..infrastructure.simple_logger import SimpleLogger
from ..ports.entity_persistence_dao import EntityPersistenceDAO, ResolveCallback
from ..ports.entity_store import EntityStorePort
from ..ports.logger import LoggerPort
from ..ports.metrics import MetricsPort
from ..ports.serializer import SerializerFactory
from .key_sequencer import KeySequencer
from .persistence_notifications import PersistenceNotifications

DAOFactory = Callable[[Path], EntityPersistenceDAO]


class LifecycleManager:
    """Manages persistence lifecycle state transitions."""

    def __init__(self, logger: LoggerPort | None = None) -> None:
        self._state = LifecycleState.UNINITIALIZED
        self._lock = asyncio.Lock()
        self._logger = logger

    async def transition_to(
        self, new_state: LifecycleState, allowed_from: list[LifecycleState]
    ) -> None:
        """Transition to a new lifecycle state with validation."""
        async with self._lock:
            if self._state not in allowed_from:
                raise LifecycleError(
                    self._state.value, new_state.value, [s.value for s in allowed_from]
                )

            old_state = self._state
            self._state = new_state

            if self._logger:
                self._logger.info(
                    "Persistence lifecycle state changed",
                    old_state=old_state.value,
                    new_state=new_state.value,
                )

    @property
    def state(self) -> LifecycleState:
        return self._state


class EntityPersistenceService:
    """Loads persisted entities into a collection, then mirrors its changes.

    Startup runs UNINITIALIZED -> LOADING -> READY:

    1. Build the DAO for the entity directory and load every stored record.
    2. Publish the loaded records into the collection as one batch while
       ``ignore_updates`` is set, so the publish cannot trigger write-backs.
    3. Subscribe to the collection's updated and removed notifications.
    4. Emit an EntitiesLoadedEvent.

    In READY, each updated notification stores the entity and each removed
    notification deletes its record. Writes for one key run in order; writes
    for different keys run concurrently. Failures are logged and reported,
    never raised into the notification source.

    Subclasses may override ``create_dao`` or ``entity_directory`` to change
    the backend or the storage location.
    """

    def __init__(
        self,
        entities: EntityStorePort,
        config: PersistenceConfig,
        serializer_factory: SerializerFactory | None = None,
        validation: ValidationFn | None = None,
        converter: RecordConverter | None = None,
        dao_factory: DAOFactory | None = None,
        notifications: PersistenceNotifications | None = None,
        on_operation_result: OperationResultCallback | None = None,
        logger: LoggerPort | None = None,
        metrics: MetricsPort | None = None,
    ):
        """Initialize the service with dependency injection.

        Args:
            entities: The entity collection to mirror
            config: Entity type and storage location settings
            serializer_factory: Record serialization (default: dicts, per config format)
            validation: Predicate rejecting corrupt records on load
            converter: Payload/record converter for the DAO
            dao_factory: Builds the DAO for a directory (default: FSDirectoryPersistence)
            notifications: Where the load-complete event is published
            on_operation_result: Receives the result of every incremental write
            logger: Optional logger port
            metrics: Optional metrics port
        """
        self._entities = entities
        self._config = config
        self._serializer_factory = serializer_factory or SerializationFactory.for_dicts(
            use_msgpack=config.use_msgpack
        )
        self._validation = validation
        self._converter = converter
        self._dao_factory = dao_factory
        self._notifications = notifications or PersistenceNotifications(logger)
        self._logger = logger or SimpleLogger("entity_persistence.service")
        self._metrics = metrics or InMemoryMetrics()

        self._lifecycle = LifecycleManager(self._logger)
        self._sequencer = KeySequencer(self._logger, self._metrics, on_operation_result)
        self._log_ctx = LogContext(
            entity_type=config.entity_type, component="EntityPersistenceService"
        )

        self._dao: EntityPersistenceDAO | None = None
        self._directory: Path | None = None
        self._ignore_updates = False
        self._subscriptions: list[Unsubscribe] = []

    # State
    @property
    def entity_type(self) -> str:
        return self._config.entity_type

    @property
    def state(self) -> LifecycleState:
        return self._lifecycle.state

    @property
    def ignore_updates(self) -> bool:
        """True while a loaded batch is being published to the collection."""
        return self._ignore_updates

    @property
    def dao(self) -> EntityPersistenceDAO | None:
        return self._dao

    @property
    def directory(self) -> Path | None:
        return self._directory

    @property
    def notifications(self) -> PersistenceNotifications:
        return self._notifications

    def is_ready(self) -> bool:
        return self._lifecycle.state == LifecycleState.READY

    # Extension points
    def entity_directory(self) -> Path:
        """Get the storage location. Override to change from the configured default."""
        return self._config.entity_directory()

    def create_dao(self, directory: Path) -> EntityPersistenceDAO:
        """Build and configure the DAO for a directory."""
        if self._dao_factory is not None:
            dao = self._dao_factory(directory)
        else:
            dao = FSDirectoryPersistence(
                directory,
                entity_type=self.entity_type,
                logger=self._logger,
                metrics=self._metrics,
            )
        return dao.configure(
            serializer_factory=self._serializer_factory,
            validation=self._validation,
            converter=self._converter,
        )

    # Lifecycle
    async def start(self) -> None:
        """Load stored entities, publish them, then start mirroring changes."""
        await self._lifecycle.transition_to(
            LifecycleState.LOADING, [LifecycleState.UNINITIALIZED]
        )

        self._directory = self.entity_directory()
        self._dao = self.create_dao(self._directory)
        self._logger.info(
            f"Persistence for {self.entity_type} at {self._directory}",
            **self._log_ctx.with_operation("start").to_dict(),
        )

        loaded = await self._load_stored(self._dao)
        if self._lifecycle.state != LifecycleState.LOADING:
            # stop() ran during the load; nothing may be published or mirrored
            self._logger.info(
                f"Persistence for {self.entity_type} stopped during load",
                **self._log_ctx.with_operation("start").to_dict(),
            )
            return
        self._publish(loaded)

        self._subscriptions = [
            self._entities.subscribe_updated(self.on_entity_updated),
            self._entities.subscribe_removed(self.on_entity_removed),
        ]
        await self._lifecycle.transition_to(LifecycleState.READY, [LifecycleState.LOADING])

        self._notifications.load_done(
            EntitiesLoadedEvent(
                entity_type=self.entity_type,
                loaded_count=len(loaded),
                skipped_count=self._dao.last_load_skipped,
                location=str(self._directory),
            )
        )

    async def stop(self) -> None:
        """Stop mirroring changes and wait for pending writes to finish."""
        await self._lifecycle.transition_to(
            LifecycleState.STOPPED,
            [LifecycleState.UNINITIALIZED, LifecycleState.LOADING, LifecycleState.READY],
        )
        for unsubscribe in self._subscriptions:
            unsubscribe()
        self._subscriptions = []
        await self._sequencer.drain()

    async def wait_idle(self) -> None:
        """Wait until every queued store/remove has completed."""
        await self._sequencer.drain()

    def pending_keys(self) -> list[str]:
        return self._sequencer.pending_keys()

    async def _load_stored(self, dao: EntityPersistenceDAO) -> list[ResolveSucceeded[Any]]:
        try:
            loaded = await dao.load_stored()
        except Exception as e:
            # Unreadable storage behaves like empty storage
            self._metrics.increment("persistence.load.error")
            self._logger.exception(
                f"Failed to load stored entities for {self.entity_type}",
                exc_info=e,
                **self._log_ctx.with_operation("load_stored").with_error(e).to_dict(),
            )
            return []

        self._logger.info(
            f"Persistence for {self.entity_type} loaded {len(loaded)} entities",
            loaded=len(loaded),
            **self._log_ctx.with_operation("load_stored").to_dict(),
        )
        return loaded

    def _publish(self, loaded: list[ResolveSucceeded[Any]]) -> None:
        self._ignore_updates = True
        try:
            self._entities.resolved_multiple(ResolvedMultiple(entities=loaded))
        except Exception as e:
            self._metrics.increment("persistence.publish.error")
            self._logger.exception(
                f"Error on dispatch of loaded entities: {e}",
                exc_info=e,
                **self._log_ctx.with_operation("publish").with_error(e).to_dict(),
            )
        finally:
            self._ignore_updates = False

    # Notification handlers
    def on_entity_updated(self, key: str) -> None:
        """Store the entity for ``key`` if it is resolved."""
        if self._ignore_updates:
            return
        try:
            # TODO: handle key aliases once the entity store port exposes them
            entity = self._entities.get_entity(key)
            if entity is None or not entity.has_resolved:
                return
            dao = self._require_dao("store")
            self._sequencer.submit(
                key, PersistenceOperation.STORE, lambda: dao.store(entity, key)
            )
        except Exception as e:
            self._metrics.increment("persistence.handler.error")
            self._logger.exception(
                f"Error on store entity with key '{key}': {e}",
                exc_info=e,
                **self._log_ctx.with_operation("store", key=key).with_error(e).to_dict(),
            )

    def on_entity_removed(self, key: str) -> None:
        """Delete the stored record for ``key``."""
        try:
            dao = self._require_dao("remove")
            self._sequencer.submit(key, PersistenceOperation.REMOVE, lambda: dao.remove(key))
        except Exception as e:
            self._metrics.increment("persistence.handler.error")
            self._logger.exception(
                f"Error on remove entity with key '{key}': {e}",
                exc_info=e,
                **self._log_ctx.with_operation("remove", key=key).with_error(e).to_dict(),
            )

    # Queries
    def resolve(
        self, key: str, callback: ResolveCallback | None = None
    ) -> asyncio.Task[ResolveResult[Any]]:
        """Resolve a single key from storage. Read-only.

        Raises:
            NotLoadedError: If called before start()
        """
        return self._require_dao("resolve").resolve(key, callback)

    def _require_dao(self, operation: str) -> EntityPersistenceDAO:
        if self._dao is None:
            raise NotLoadedError(self.entity_type, operation)
        return self._dao
