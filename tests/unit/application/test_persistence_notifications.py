"""Tests for PersistenceNotifications."""

import asyncio
from unittest.mock import Mock

import pytest

from entity_persistence.application.persistence_notifications import PersistenceNotifications
from entity_persistence.domain.events import EntitiesLoadedEvent


def loaded(entity_type="app.Profile", count=2):
    return EntitiesLoadedEvent(entity_type=entity_type, loaded_count=count)


class TestPersistenceNotifications:
    """Test cases for load-complete notifications."""

    def test_subscriber_notified_once(self, mock_logger):
        notifications = PersistenceNotifications(mock_logger)
        handler = Mock()
        notifications.subscribe("app.Profile", handler)
        event = loaded()

        assert notifications.load_done(event) is True
        assert notifications.load_done(loaded()) is False

        handler.assert_called_once_with(event)
        mock_logger.warning.assert_called_once()

    def test_late_subscriber_called_immediately(self, mock_logger):
        notifications = PersistenceNotifications(mock_logger)
        event = loaded()
        notifications.load_done(event)
        handler = Mock()

        notifications.subscribe("app.Profile", handler)

        handler.assert_called_once_with(event)

    def test_other_types_not_notified(self, mock_logger):
        notifications = PersistenceNotifications(mock_logger)
        handler = Mock()
        notifications.subscribe("app.Other", handler)

        notifications.load_done(loaded())

        handler.assert_not_called()
        assert notifications.is_loaded("app.Profile")
        assert not notifications.is_loaded("app.Other")

    def test_unsubscribe(self, mock_logger):
        notifications = PersistenceNotifications(mock_logger)
        handler = Mock()
        unsubscribe = notifications.subscribe("app.Profile", handler)

        unsubscribe()
        notifications.load_done(loaded())

        handler.assert_not_called()

    def test_failing_handler_logged(self, mock_logger):
        notifications = PersistenceNotifications(mock_logger)
        healthy = Mock()
        notifications.subscribe("app.Profile", Mock(side_effect=RuntimeError("boom")))
        notifications.subscribe("app.Profile", healthy)

        assert notifications.load_done(loaded()) is True

        healthy.assert_called_once()
        mock_logger.exception.assert_called_once()

    def test_loaded_event(self, mock_logger):
        notifications = PersistenceNotifications(mock_logger)
        event = loaded(count=5)

        assert notifications.loaded_event("app.Profile") is None
        notifications.load_done(event)
        assert notifications.loaded_event("app.Profile") is event

    def test_instances_are_independent(self, mock_logger):
        first = PersistenceNotifications(mock_logger)
        second = PersistenceNotifications(mock_logger)

        first.load_done(loaded())

        assert not second.is_loaded("app.Profile")

    @pytest.mark.asyncio
    async def test_wait_loaded(self, mock_logger):
        notifications = PersistenceNotifications(mock_logger)
        event = loaded()

        waiter = asyncio.create_task(notifications.wait_loaded("app.Profile"))
        await asyncio.sleep(0)
        assert not waiter.done()

        notifications.load_done(event)

        assert await asyncio.wait_for(waiter, timeout=1) is event

    @pytest.mark.asyncio
    async def test_wait_loaded_after_load(self, mock_logger):
        notifications = PersistenceNotifications(mock_logger)
        event = loaded()
        notifications.load_done(event)

        assert await notifications.wait_loaded("app.Profile") is event
