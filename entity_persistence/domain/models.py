"""Domain models for entities and their persisted records."""

from datetime import UTC, datetime
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .enums import PersistenceOperation, ResolveStatus

DataT = TypeVar("DataT")


class Entity(BaseModel, Generic[DataT]):
    """An identified, typed, resolvable unit of application state.

    Entities are owned by the entity collection. The persistence layer only
    mirrors their state and never originates identity.
    """

    model_config = ConfigDict(
        extra="forbid",
        arbitrary_types_allowed=True,
        validate_assignment=True,
    )

    key: str = Field(..., min_length=1, description="Unique entity key")
    status: ResolveStatus = Field(
        default=ResolveStatus.UNRESOLVED, description="Resolution status"
    )
    data: DataT | None = Field(default=None, description="Entity payload")
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        description="When the entity was last resolved or changed",
    )

    @property
    def has_resolved(self) -> bool:
        """Check whether the entity carries resolved data."""
        return self.status == ResolveStatus.RESOLVED


class ResolveSucceeded(BaseModel, Generic[DataT]):
    """A successfully loaded (key, payload) pair."""

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        arbitrary_types_allowed=True,
    )

    key: str = Field(..., min_length=1, description="Entity key")
    data: DataT = Field(..., description="Loaded payload")


class ResolvedMultiple(BaseModel):
    """An ordered batch of loaded entities, published to the collection at once."""

    model_config = ConfigDict(
        extra="forbid",
        arbitrary_types_allowed=True,
    )

    entities: list[ResolveSucceeded] = Field(
        default_factory=list, description="Loaded entities in load order"
    )

    def keys(self) -> list[str]:
        """Return the keys of the batch in order."""
        return [entry.key for entry in self.entities]

    def __len__(self) -> int:
        return len(self.entities)


class ResolveResult(BaseModel, Generic[DataT]):
    """Outcome of resolving a single key from storage."""

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        arbitrary_types_allowed=True,
    )

    key: str = Field(..., min_length=1, description="Requested key")
    found: bool = Field(..., description="Whether a stored record exists")
    data: DataT | None = Field(default=None, description="Payload when found")

    @model_validator(mode="after")
    def validate_miss_has_no_data(self) -> "ResolveResult":
        """Ensure a miss carries no payload."""
        if not self.found and self.data is not None:
            raise ValueError("A not-found result cannot carry data")
        return self

    @classmethod
    def hit(cls, key: str, data: Any) -> "ResolveResult":
        """Create a found result."""
        return cls(key=key, found=True, data=data)

    @classmethod
    def miss(cls, key: str) -> "ResolveResult":
        """Create a not-found result."""
        return cls(key=key, found=False)


class PersistenceInfo(BaseModel):
    """Whether a given key currently has a persisted record."""

    model_config = ConfigDict(frozen=True, extra="forbid", strict=True)

    key: str = Field(..., min_length=1)
    is_stored: bool = Field(...)


class OperationResult(BaseModel):
    """Outcome of a store or remove, reported instead of raising.

    Incremental writes are fire-and-forget from the notification source's
    point of view, so their failures travel through these results and the log.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        strict=True,
    )

    key: str = Field(..., min_length=1)
    operation: PersistenceOperation = Field(...)
    success: bool = Field(...)
    superseded: bool = Field(
        default=False,
        description="Skipped because a later write for the same key replaced it",
    )
    error: str | None = Field(default=None, description="Error message on failure")
    error_type: str | None = Field(default=None, description="Exception class name")
    duration_ms: float | None = Field(default=None, ge=0)

    @model_validator(mode="after")
    def validate_error_consistency(self) -> "OperationResult":
        """A failed result must say why; a successful one must not."""
        if self.success and self.error is not None:
            raise ValueError("A successful operation cannot carry an error")
        if not self.success and self.error is None:
            raise ValueError("A failed operation requires an error message")
        return self

    @classmethod
    def succeeded(
        cls,
        key: str,
        operation: PersistenceOperation,
        superseded: bool = False,
        duration_ms: float | None = None,
    ) -> "OperationResult":
        return cls(
            key=key,
            operation=operation,
            success=True,
            superseded=superseded,
            duration_ms=duration_ms,
        )

    @classmethod
    def failed(
        cls,
        key: str,
        operation: PersistenceOperation,
        error: Exception,
        duration_ms: float | None = None,
    ) -> "OperationResult":
        return cls(
            key=key,
            operation=operation,
            success=False,
            error=str(error) or type(error).__name__,
            error_type=type(error).__name__,
            duration_ms=duration_ms,
        )
