"""Domain-specific exceptions for entity persistence."""


class EntityPersistenceError(Exception):
    """Base exception for all entity persistence errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class SerializationError(EntityPersistenceError):
    """Serialization/deserialization errors."""

    pass


class RecordValidationError(EntityPersistenceError):
    """Raised when a stored record fails the configured validation."""

    def __init__(self, key: str, reason: str | None = None):
        message = f"Stored record for key '{key}' failed validation"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message, details={"key": key})
        self.key = key


class RecordAccessError(EntityPersistenceError):
    """Base exception for a failed write against the backing store."""

    def __init__(self, message: str, key: str, operation: str):
        super().__init__(message, details={"key": key, "operation": operation})
        self.key = key
        self.operation = operation


class StoreError(RecordAccessError):
    """Raised when persisting an entity fails."""

    def __init__(self, key: str, reason: str):
        super().__init__(f"Failed to store entity '{key}': {reason}", key=key, operation="store")


class RemoveError(RecordAccessError):
    """Raised when deleting a persisted record fails."""

    def __init__(self, key: str, reason: str):
        super().__init__(
            f"Failed to remove entity '{key}': {reason}", key=key, operation="remove"
        )


class NotLoadedError(EntityPersistenceError):
    """Raised when an operation needs the persistence layer before it has started."""

    def __init__(self, entity_type: str, operation: str):
        super().__init__(
            f"Persistence for '{entity_type}' has not started. Cannot perform '{operation}'.",
            details={"entity_type": entity_type, "operation": operation},
        )
        self.entity_type = entity_type
        self.operation = operation


class LifecycleError(EntityPersistenceError):
    """Raised on an illegal lifecycle state transition."""

    def __init__(self, current: str, target: str, allowed_from: list[str]):
        super().__init__(
            f"Cannot transition from {current} to {target}. Allowed from: {allowed_from}",
            details={"current": current, "target": target, "allowed_from": allowed_from},
        )
        self.current = current
        self.target = target
