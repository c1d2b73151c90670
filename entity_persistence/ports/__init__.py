"""Ports layer - Interfaces for storage, the entity collection and observability."""

from .entity_persistence_dao import EntityPersistenceDAO, ResolveCallback
from .entity_store import EntityStorePort
from .logger import LoggerPort
from .metrics import MetricsPort
from .serializer import Serializer, SerializerFactory

__all__ = [
    "EntityPersistenceDAO",
    "EntityStorePort",
    "LoggerPort",
    "MetricsPort",
    "ResolveCallback",
    "Serializer",
    "SerializerFactory",
]
