"""Tests for persistence domain events."""

from datetime import datetime

import pytest
from pydantic import ValidationError

from entity_persistence.domain.events import EntitiesLoadedEvent


class TestEntitiesLoadedEvent:
    """Test cases for EntitiesLoadedEvent."""

    def test_event_type_is_set(self):
        event = EntitiesLoadedEvent(entity_type="app.Profile", loaded_count=3)

        assert event.event_type == "EntitiesLoaded"
        assert event.skipped_count == 0
        assert isinstance(event.occurred_at, datetime)
        assert event.event_id

    def test_event_type_cannot_be_overridden(self):
        event = EntitiesLoadedEvent(
            entity_type="app.Profile", loaded_count=0, event_type="Other"
        )

        assert event.event_type == "EntitiesLoaded"

    def test_negative_counts_rejected(self):
        with pytest.raises(ValidationError):
            EntitiesLoadedEvent(entity_type="app.Profile", loaded_count=-1)

    def test_entity_type_required(self):
        with pytest.raises(ValidationError):
            EntitiesLoadedEvent(entity_type="", loaded_count=0)

    def test_immutable(self):
        event = EntitiesLoadedEvent(entity_type="app.Profile", loaded_count=1)

        with pytest.raises(ValidationError):
            event.loaded_count = 2

    def test_unique_event_ids(self):
        first = EntitiesLoadedEvent(entity_type="a", loaded_count=0)
        second = EntitiesLoadedEvent(entity_type="a", loaded_count=0)

        assert first.event_id != second.event_id
