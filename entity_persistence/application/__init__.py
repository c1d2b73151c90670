"""Application layer - Persistence lifecycle orchestration."""

from .entity_persistence_service import EntityPersistenceService, LifecycleManager
from .key_sequencer import KeySequencer
from .persistence_notifications import PersistenceNotifications

__all__ = [
    "EntityPersistenceService",
    "KeySequencer",
    "LifecycleManager",
    "PersistenceNotifications",
]
