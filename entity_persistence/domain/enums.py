"""Domain enums for type safety and consistency.

This module centralizes the enumeration types used across the package.
"""

from enum import Enum


class ResolveStatus(str, Enum):
    """Resolution state of an entity held by the entity collection."""

    UNRESOLVED = "UNRESOLVED"  # Known key, no data yet
    RESOLVED = "RESOLVED"  # Data available
    FAILED = "FAILED"  # Last resolve attempt failed


class LifecycleState(str, Enum):
    """Lifecycle of a persistence service.

    UNINITIALIZED -> LOADING -> READY -> STOPPED
    """

    UNINITIALIZED = "UNINITIALIZED"
    LOADING = "LOADING"  # Bulk load in progress, no incremental writes
    READY = "READY"  # Mirroring updated/removed notifications to storage
    STOPPED = "STOPPED"


class PersistenceOperation(str, Enum):
    """Write operations issued against the backing store."""

    STORE = "store"
    REMOVE = "remove"
