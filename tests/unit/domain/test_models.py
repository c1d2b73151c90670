"""Tests for domain models."""

import pytest
from pydantic import ValidationError

from entity_persistence.domain.enums import PersistenceOperation, ResolveStatus
from entity_persistence.domain.models import (
    Entity,
    OperationResult,
    PersistenceInfo,
    ResolvedMultiple,
    ResolveResult,
    ResolveSucceeded,
)


class TestEntity:
    """Test cases for Entity."""

    def test_defaults_to_unresolved(self):
        """Test a new entity has no data and is not resolved."""
        entity = Entity(key="a")

        assert entity.status == ResolveStatus.UNRESOLVED
        assert entity.data is None
        assert entity.has_resolved is False

    def test_has_resolved_only_for_resolved_status(self):
        """Test has_resolved is false for failed entities."""
        assert Entity(key="a", status=ResolveStatus.RESOLVED, data=1).has_resolved
        assert not Entity(key="a", status=ResolveStatus.FAILED, data=1).has_resolved

    def test_empty_key_rejected(self):
        """Test that entity keys cannot be empty."""
        with pytest.raises(ValidationError):
            Entity(key="")

    def test_key_whitespace_preserved(self):
        """Test that keys are used verbatim."""
        assert Entity(key=" a ").key == " a "

    def test_arbitrary_payload(self):
        """Test that any payload type is accepted."""
        payload = {"nested": [1, 2, {"x": "y"}]}
        entity = Entity(key="a", status=ResolveStatus.RESOLVED, data=payload)

        assert entity.data == payload


class TestResolvedMultiple:
    """Test cases for the loaded batch."""

    def test_keys_in_order(self):
        """Test keys() preserves load order."""
        batch = ResolvedMultiple(
            entities=[ResolveSucceeded(key="b", data=2), ResolveSucceeded(key="a", data=1)]
        )

        assert batch.keys() == ["b", "a"]
        assert len(batch) == 2

    def test_empty_batch(self):
        """Test an empty batch is valid."""
        batch = ResolvedMultiple()

        assert batch.keys() == []
        assert len(batch) == 0


class TestResolveResult:
    """Test cases for ResolveResult."""

    def test_hit(self):
        result = ResolveResult.hit("a", {"v": 1})

        assert result.found is True
        assert result.data == {"v": 1}

    def test_miss(self):
        result = ResolveResult.miss("a")

        assert result.found is False
        assert result.data is None

    def test_miss_with_data_rejected(self):
        """Test a not-found result cannot carry data."""
        with pytest.raises(ValidationError) as exc_info:
            ResolveResult(key="a", found=False, data=1)
        assert "cannot carry data" in str(exc_info.value)


class TestPersistenceInfo:
    """Test cases for PersistenceInfo."""

    def test_frozen(self):
        info = PersistenceInfo(key="a", is_stored=True)

        with pytest.raises(ValidationError):
            info.is_stored = False

    def test_strict_bool(self):
        """Test that is_stored does not coerce strings."""
        with pytest.raises(ValidationError):
            PersistenceInfo(key="a", is_stored="yes")


class TestOperationResult:
    """Test cases for OperationResult."""

    def test_succeeded(self):
        result = OperationResult.succeeded("a", PersistenceOperation.STORE, duration_ms=1.5)

        assert result.success is True
        assert result.superseded is False
        assert result.error is None
        assert result.duration_ms == 1.5

    def test_failed_captures_exception(self):
        result = OperationResult.failed("a", PersistenceOperation.REMOVE, OSError("disk full"))

        assert result.success is False
        assert result.error == "disk full"
        assert result.error_type == "OSError"

    def test_failed_with_empty_message_uses_type_name(self):
        result = OperationResult.failed("a", PersistenceOperation.STORE, RuntimeError())

        assert result.error == "RuntimeError"

    def test_success_with_error_rejected(self):
        with pytest.raises(ValidationError):
            OperationResult(
                key="a", operation=PersistenceOperation.STORE, success=True, error="boom"
            )

    def test_failure_without_error_rejected(self):
        with pytest.raises(ValidationError):
            OperationResult(key="a", operation=PersistenceOperation.STORE, success=False)
