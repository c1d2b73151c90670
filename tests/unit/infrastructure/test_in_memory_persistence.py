"""Tests for the in-memory DAO."""

import pytest

from entity_persistence.domain.enums import ResolveStatus
from entity_persistence.domain.models import Entity
from entity_persistence.infrastructure.in_memory_persistence import InMemoryEntityPersistence
from entity_persistence.infrastructure.serialization import deserialize_dict


class TestInMemoryEntityPersistence:
    """Test cases for InMemoryEntityPersistence."""

    @pytest.mark.asyncio
    async def test_records_hold_serialized_bytes(self, memory_dao, records):
        await memory_dao.store(Entity(key="a", status=ResolveStatus.RESOLVED, data={"n": 1}), "a")

        assert isinstance(records["a"], bytes)
        assert deserialize_dict(records["a"], use_msgpack=False) == {"n": 1}
        assert memory_dao.records is records

    @pytest.mark.asyncio
    async def test_instances_share_backing_store(self, records):
        writer = InMemoryEntityPersistence(records)
        reader = InMemoryEntityPersistence(records)

        await writer.store(Entity(key="a", status=ResolveStatus.RESOLVED, data={"n": 1}), "a")

        assert (await reader.get_persistence_info("a")).is_stored is True

    def test_default_entity_type(self):
        dao = InMemoryEntityPersistence()

        assert dao.entity_type == "in_memory"
        assert dao.records == {}
