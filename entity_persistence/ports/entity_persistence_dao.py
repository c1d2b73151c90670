"""Entity persistence DAO - Port definition for durable entity storage."""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any

from ..domain.models import (
    Entity,
    OperationResult,
    PersistenceInfo,
    ResolveResult,
    ResolveSucceeded,
)
from ..domain.types import RecordConverter, ValidationFn
from .serializer import SerializerFactory

ResolveCallback = Callable[["asyncio.Task[ResolveResult]"], None]


class EntityPersistenceDAO(ABC):
    """Abstract interface for loading and storing entities.

    This port mediates between entities and their durable representation.
    It owns serialization and validation of stored records, independently
    of the in-memory shape of any particular entity type.
    """

    @abstractmethod
    def set_serializer_factory(self, serializer_factory: SerializerFactory) -> EntityPersistenceDAO:
        """Set the serialization strategy.

        Args:
            serializer_factory: Factory for the record serializer

        Returns:
            This instance, for chaining
        """
        ...

    @abstractmethod
    def set_serial_type_validation(self, is_valid: ValidationFn) -> EntityPersistenceDAO:
        """Set the predicate used to reject corrupt records during load.

        Args:
            is_valid: Returns False for records that must not be trusted

        Returns:
            This instance, for chaining
        """
        ...

    def configure(
        self,
        serializer_factory: SerializerFactory | None = None,
        validation: ValidationFn | None = None,
        converter: RecordConverter | None = None,
    ) -> EntityPersistenceDAO:
        """Configure serialization, validation and conversion in one call.

        Args:
            serializer_factory: Optional factory for the record serializer
            validation: Optional record validation predicate
            converter: Optional payload/record converter

        Returns:
            This instance, for chaining
        """
        if serializer_factory is not None:
            self.set_serializer_factory(serializer_factory)
        if validation is not None:
            self.set_serial_type_validation(validation)
        if converter is not None:
            self.set_converter(converter)
        return self

    @property
    def last_load_skipped(self) -> int:
        """Number of records the most recent load_stored() skipped."""
        return 0

    @abstractmethod
    def set_converter(self, converter: RecordConverter) -> EntityPersistenceDAO:
        """Set the payload/record converter used when stored and in-memory shapes differ."""
        ...

    @abstractmethod
    async def load_stored(self) -> list[ResolveSucceeded[Any]]:
        """Load every stored record.

        Corrupt or invalid records are skipped and logged individually;
        a single bad record never fails the whole load.

        Returns:
            The loaded (key, payload) pairs that validated
        """
        ...

    @abstractmethod
    def resolve(
        self, key: str, callback: ResolveCallback | None = None
    ) -> asyncio.Task[ResolveResult[Any]]:
        """Start resolving a single key from storage.

        Must be called from a running event loop. The returned task can be
        awaited or cancelled by the caller. Resolving only reads; it never
        writes through to storage.

        Args:
            key: The key to resolve
            callback: Optional callable invoked with the finished task

        Returns:
            A task yielding a found or not-found ResolveResult
        """
        ...

    @abstractmethod
    async def store(self, entity: Entity[Any], key: str) -> OperationResult:
        """Serialize an entity's payload and persist it under ``key``.

        Storing the same key again overwrites it. A later store or remove
        for the same key supersedes one that has not started writing yet.

        Args:
            entity: The entity whose payload to persist
            key: The key to persist under

        Returns:
            The operation result

        Raises:
            SerializationError: If the payload cannot be serialized
            StoreError: If the write fails
        """
        ...

    @abstractmethod
    async def remove(self, key: str) -> OperationResult:
        """Delete the persisted record for ``key``.

        Removing a key with no record succeeds.

        Args:
            key: The key to remove

        Returns:
            The operation result

        Raises:
            RemoveError: If the delete fails
        """
        ...

    @abstractmethod
    async def get_persistence_info(self, key: str) -> PersistenceInfo:
        """Check whether ``key`` currently has a persisted record."""
        ...
