"""Configuration objects for the persistence infrastructure."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

CACHE_ROOT_ENV_VAR = "ENTITY_PERSISTENCE_CACHE_ROOT"


def default_cache_root() -> Path:
    """Root cache directory: the environment override, else the system temp dir."""
    override = os.environ.get(CACHE_ROOT_ENV_VAR)
    if override:
        return Path(override)
    return Path(tempfile.gettempdir())


class PersistenceConfig(BaseModel):
    """Strongly-typed configuration for one persisted entity type.

    The storage location is derived deterministically as
    ``{cache_root}/{product_namespace}/{entities_segment}/{entity_type}/...``
    with every segment below the cache root lower-cased, unless
    ``directory_override`` is set.

    The cache root itself keeps its case. Lower-casing the whole path would
    move records off a root such as ``/Volumes/Cache`` on case-sensitive
    file systems.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        str_strip_whitespace=True,
        strict=True,
    )

    entity_type: str = Field(
        ...,
        min_length=1,
        description="Namespace of the persisted entity type, e.g. 'myapp.models.Profile'",
    )
    cache_root: Path = Field(
        default_factory=default_cache_root,
        description="Root cache directory",
    )
    product_namespace: str = Field(
        default="entity_persistence",
        min_length=1,
        description="Fixed product namespace segment",
    )
    entities_segment: str = Field(
        default="entities",
        min_length=1,
        description="Path segment grouping all entity types",
    )
    additional_path_parts: tuple[str, ...] = Field(
        default=(),
        description="Extra segments appended below the entity type directory",
    )
    directory_override: Path | None = Field(
        default=None,
        description="Use this directory as-is instead of the derived one",
    )
    use_msgpack: bool = Field(
        default=False,
        description="Store records as MessagePack instead of JSON",
    )

    @field_validator("cache_root", "directory_override", mode="before")
    @classmethod
    def parse_path(cls, v: Any) -> Path | None:
        """Accept str or Path for directory settings."""
        if v is None or isinstance(v, Path):
            return v
        if isinstance(v, str):
            return Path(v)
        raise ValueError(f"Invalid path type: {type(v)}")

    @field_validator("additional_path_parts", mode="before")
    @classmethod
    def parse_path_parts(cls, v: Any) -> tuple[str, ...]:
        """Accept any sequence of segments."""
        if isinstance(v, (list, tuple)):
            return tuple(v)
        raise ValueError(f"Invalid path parts type: {type(v)}")

    @field_validator("entity_type", "product_namespace", "entities_segment")
    @classmethod
    def validate_segment(cls, v: str) -> str:
        """Ensure a segment cannot escape its parent directory."""
        return _check_segment(v)

    @field_validator("additional_path_parts")
    @classmethod
    def validate_path_parts(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        """Ensure extra segments cannot escape their parent directory."""
        for part in v:
            _check_segment(part)
        return v

    @classmethod
    def for_type(cls, data_type: type, **kwargs: Any) -> PersistenceConfig:
        """Create a config namespaced by a type's fully-qualified name."""
        return cls(entity_type=f"{data_type.__module__}.{data_type.__qualname__}", **kwargs)

    def entity_directory(self) -> Path:
        """Get the directory holding this entity type's records."""
        if self.directory_override is not None:
            return self.directory_override
        parts = [
            self.product_namespace,
            self.entities_segment,
            self.entity_type,
            *self.additional_path_parts,
        ]
        return self.cache_root.joinpath(*(part.lower() for part in parts))


def _check_segment(segment: str) -> str:
    if not segment or segment in (".", ".."):
        raise ValueError(f"Invalid path segment: '{segment}'")
    if "/" in segment or "\\" in segment:
        raise ValueError(f"Path segment '{segment}' must not contain path separators")
    return segment


class LogContext(BaseModel):
    """Strongly-typed context for structured logging.

    Provides a consistent way to pass context to loggers so that every load,
    store and remove line carries the entity type and key involved.
    """

    model_config = ConfigDict(
        extra="allow",  # Allow additional fields for flexibility
        str_strip_whitespace=True,
        strict=False,  # Allow coercion for convenience
        validate_assignment=True,
    )

    entity_type: str | None = Field(default=None, description="Persisted entity type")
    key: str | None = Field(default=None, description="Entity key")
    operation: str | None = Field(default=None, description="Current operation")
    component: str | None = Field(default=None, description="Component generating the log")
    error_code: str | None = Field(default=None, description="Structured error code")
    error_type: str | None = Field(default=None, description="Type of error encountered")
    duration_ms: float | None = Field(default=None, ge=0, description="Duration in milliseconds")

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging frameworks."""
        return {k: v for k, v in self.model_dump().items() if v is not None}

    def with_error(self, error: Exception) -> LogContext:
        """Create a new context with error information."""
        return LogContext(
            **{
                **self.model_dump(),
                "error_code": error.__class__.__name__,
                "error_type": type(error).__module__ + "." + type(error).__name__,
            }
        )

    def with_operation(self, operation: str, key: str | None = None) -> LogContext:
        """Create a new context for an operation, optionally on a specific key."""
        return LogContext(
            **{
                **self.model_dump(),
                "operation": operation,
                "key": key if key is not None else self.key,
            }
        )
