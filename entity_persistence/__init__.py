"""Entity persistence - mirror an in-memory entity collection to durable storage."""

from .application.entity_persistence_service import EntityPersistenceService
from .application.persistence_notifications import PersistenceNotifications
from .infrastructure.config import PersistenceConfig
from .infrastructure.fs_directory_persistence import FSDirectoryPersistence

__all__ = [
    "EntityPersistenceService",
    "FSDirectoryPersistence",
    "PersistenceConfig",
    "PersistenceNotifications",
]
__version__ = "0.1.0"
