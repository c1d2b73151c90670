"""End-to-end persistence scenarios over the file-system backend."""

import pytest
from pydantic import BaseModel

from entity_persistence import EntityPersistenceService, PersistenceConfig, PersistenceNotifications
from entity_persistence.infrastructure.in_memory_entity_store import InMemoryEntityStore
from entity_persistence.infrastructure.in_memory_metrics import InMemoryMetrics
from entity_persistence.infrastructure.serialization import SerializationFactory


class Profile(BaseModel):
    name: str
    level: int = 1


async def start_service(config, **kwargs):
    entities = InMemoryEntityStore()
    service = EntityPersistenceService(entities, config, **kwargs)
    await service.start()
    return service, entities


@pytest.mark.integration
class TestPersistenceScenario:
    """Entities survive a restart and follow every change made before it."""

    @pytest.mark.asyncio
    async def test_changes_survive_restart(self, tmp_path):
        config = PersistenceConfig(entity_type="tests.Profile", cache_root=tmp_path)

        service, entities = await start_service(config)
        entities.put("a", {"name": "X"})
        entities.put("b", {"name": "Y"})
        await service.wait_idle()
        entities.put("a", {"name": "Z"})
        entities.remove("b")
        await service.stop()

        restarted, reloaded = await start_service(config)

        assert reloaded.snapshot() == {"a": {"name": "Z"}}
        assert restarted.pending_keys() == []
        await restarted.stop()

    @pytest.mark.asyncio
    async def test_model_records_in_msgpack(self, tmp_path):
        config = PersistenceConfig.for_type(Profile, cache_root=tmp_path, use_msgpack=True)
        factory = SerializationFactory.for_model(Profile, use_msgpack=True)

        service, entities = await start_service(config, serializer_factory=factory)
        entities.put("ada", Profile(name="Ada", level=3))
        await service.stop()

        files = sorted(p.name for p in config.entity_directory().iterdir())
        assert files == ["ada.msgpack"]

        _, reloaded = await start_service(config, serializer_factory=factory)
        assert reloaded.snapshot() == {"ada": Profile(name="Ada", level=3)}

    @pytest.mark.asyncio
    async def test_corrupt_file_skipped_on_restart(self, tmp_path):
        config = PersistenceConfig(entity_type="tests.Profile", cache_root=tmp_path)
        service, entities = await start_service(config)
        entities.put("a", {"name": "X"})
        entities.put("b", {"name": "Y"})
        await service.stop()
        (config.entity_directory() / "b.json").write_bytes(b"\x00truncated")

        notifications = PersistenceNotifications()
        metrics = InMemoryMetrics()
        _, reloaded = await start_service(config, notifications=notifications, metrics=metrics)

        assert reloaded.snapshot() == {"a": {"name": "X"}}
        event = notifications.loaded_event("tests.Profile")
        assert (event.loaded_count, event.skipped_count) == (1, 1)
        assert metrics.counter("persistence.load.skipped") == 1

    @pytest.mark.asyncio
    async def test_validation_rejects_foreign_records(self, tmp_path):
        config = PersistenceConfig(entity_type="tests.Profile", cache_root=tmp_path)
        service, entities = await start_service(config)
        entities.put("a", {"name": "X"})
        entities.put("b", {"unexpected": True})
        await service.stop()

        _, reloaded = await start_service(config, validation=lambda record: "name" in record)

        assert reloaded.snapshot() == {"a": {"name": "X"}}

    @pytest.mark.asyncio
    async def test_types_are_isolated(self, tmp_path):
        profiles = PersistenceConfig(entity_type="tests.Profile", cache_root=tmp_path)
        teams = PersistenceConfig(entity_type="tests.Team", cache_root=tmp_path)

        service, entities = await start_service(profiles)
        entities.put("a", {"name": "X"})
        await service.stop()

        _, team_entities = await start_service(teams)
        assert team_entities.snapshot() == {}

    @pytest.mark.asyncio
    async def test_resolve_after_restart(self, tmp_path):
        config = PersistenceConfig(
            entity_type="tests.Profile", cache_root=tmp_path, additional_path_parts=["user-1"]
        )
        service, entities = await start_service(config)
        entities.put("a/b", {"name": "X"})
        await service.stop()

        restarted, _ = await start_service(config)
        result = await restarted.resolve("a/b")

        assert result.found is True
        assert result.data == {"name": "X"}
        assert (await restarted.resolve("missing")).found is False
