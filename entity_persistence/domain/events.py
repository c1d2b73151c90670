"""Domain events for the persistence lifecycle."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class PersistenceEvent(BaseModel):
    """Base class for persistence events.

    Events are immutable facts about something that already happened to a
    persisted entity type.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        str_strip_whitespace=True,
        strict=True,
    )

    event_id: str = Field(
        default_factory=lambda: str(uuid.uuid4()),
        description="Unique event identifier",
    )
    occurred_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        description="When the event occurred",
    )
    entity_type: str = Field(
        ...,
        min_length=1,
        description="Namespace of the persisted entity type",
    )
    event_type: str = Field(
        ...,
        description="Type of the event",
    )
    metadata: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event metadata",
    )


class EntitiesLoadedEvent(PersistenceEvent):
    """Emitted once per entity type when the startup bulk load has finished.

    Fired whether the load fully succeeded or skipped some records.
    """

    loaded_count: int = Field(..., ge=0, description="Entities published to the collection")
    skipped_count: int = Field(default=0, ge=0, description="Corrupt or invalid records")
    location: str = Field(default="", description="Where the records were loaded from")

    def __init__(self, **data: Any) -> None:
        """Initialize with proper event type."""
        data["event_type"] = "EntitiesLoaded"
        super().__init__(**data)
