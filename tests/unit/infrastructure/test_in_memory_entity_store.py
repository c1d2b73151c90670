"""Tests for the in-memory entity collection."""

from unittest.mock import Mock

from entity_persistence.domain.enums import ResolveStatus
from entity_persistence.domain.models import ResolvedMultiple, ResolveSucceeded


class TestInMemoryEntityStore:
    """Test cases for InMemoryEntityStore."""

    def test_get_missing_entity(self, entity_store):
        assert entity_store.get_entity("missing") is None

    def test_put_resolves_and_notifies(self, entity_store):
        handler = Mock()
        entity_store.subscribe_updated(handler)

        entity_store.put("a", {"name": "ada"})

        entity = entity_store.get_entity("a")
        assert entity.status == ResolveStatus.RESOLVED
        assert entity.data == {"name": "ada"}
        handler.assert_called_once_with("a")

    def test_resolved_multiple_applies_batch_before_notifying(self, entity_store):
        seen = []

        def handler(key):
            # Every entity of the batch is visible from the first notification
            seen.append((key, sorted(entity_store.keys())))

        entity_store.subscribe_updated(handler)
        batch = ResolvedMultiple(
            entities=[
                ResolveSucceeded(key="a", data={"name": "ada"}),
                ResolveSucceeded(key="b", data={"name": "bob"}),
            ]
        )

        entity_store.resolved_multiple(batch)

        assert seen == [("a", ["a", "b"]), ("b", ["a", "b"])]
        assert entity_store.snapshot() == {"a": {"name": "ada"}, "b": {"name": "bob"}}

    def test_begin_resolve_is_unresolved(self, entity_store):
        entity = entity_store.begin_resolve("a")

        assert entity.status == ResolveStatus.UNRESOLVED
        assert entity.has_resolved is False
        assert entity_store.snapshot() == {}

    def test_mark_failed_keeps_previous_data(self, entity_store):
        entity_store.put("a", {"name": "ada"})

        entity = entity_store.mark_failed("a")

        assert entity.status == ResolveStatus.FAILED
        assert entity.data == {"name": "ada"}

    def test_remove_notifies_only_existing(self, entity_store):
        handler = Mock()
        entity_store.subscribe_removed(handler)
        entity_store.put("a", {"name": "ada"})

        assert entity_store.remove("a") is True
        assert entity_store.remove("a") is False

        handler.assert_called_once_with("a")
        assert len(entity_store) == 0

    def test_unsubscribe(self, entity_store):
        handler = Mock()
        unsubscribe = entity_store.subscribe_updated(handler)

        unsubscribe()
        unsubscribe()
        entity_store.put("a", 1)

        handler.assert_not_called()

    def test_failing_handler_does_not_stop_delivery(self, entity_store, mock_logger):
        failing = Mock(side_effect=RuntimeError("boom"))
        healthy = Mock()
        entity_store.subscribe_updated(failing)
        entity_store.subscribe_updated(healthy)

        entity_store.put("a", 1)

        healthy.assert_called_once_with("a")
        mock_logger.exception.assert_called_once()
