"""Domain layer - Entities, records, events and errors."""

from .enums import LifecycleState, PersistenceOperation, ResolveStatus
from .events import EntitiesLoadedEvent, PersistenceEvent
from .exceptions import (
    EntityPersistenceError,
    LifecycleError,
    NotLoadedError,
    RecordAccessError,
    RecordValidationError,
    RemoveError,
    SerializationError,
    StoreError,
)
from .models import (
    Entity,
    OperationResult,
    PersistenceInfo,
    ResolvedMultiple,
    ResolveResult,
    ResolveSucceeded,
)
from .types import (
    EntityChangedHandler,
    LoadCompleteHandler,
    OperationResultCallback,
    RecordConverter,
    Unsubscribe,
    ValidationFn,
)

__all__ = [
    # Events
    "EntitiesLoadedEvent",
    # Models
    "Entity",
    # Types
    "EntityChangedHandler",
    # Exceptions
    "EntityPersistenceError",
    "LifecycleError",
    # Enums
    "LifecycleState",
    "LoadCompleteHandler",
    "NotLoadedError",
    "OperationResult",
    "OperationResultCallback",
    "PersistenceEvent",
    "PersistenceInfo",
    "PersistenceOperation",
    "RecordAccessError",
    "RecordConverter",
    "RecordValidationError",
    "RemoveError",
    "ResolveResult",
    "ResolveStatus",
    "ResolveSucceeded",
    "ResolvedMultiple",
    "SerializationError",
    "StoreError",
    "Unsubscribe",
    "ValidationFn",
]
