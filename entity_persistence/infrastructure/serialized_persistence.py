"""Shared DAO implementation over raw byte storage.

Backends only provide four byte-level primitives. Everything above them
(serialization, validation, conversion, per-key write ordering, logging and
metrics) lives here so every backend behaves the same way.
"""

from __future__ import annotations

import asyncio
import time
from abc import abstractmethod
from typing import Any

from ..domain.enums import PersistenceOperation
from ..domain.exceptions import (
    RecordValidationError,
    RemoveError,
    SerializationError,
    StoreError,
)
from ..domain.models import (
    Entity,
    OperationResult,
    PersistenceInfo,
    ResolveResult,
    ResolveSucceeded,
)
from ..domain.types import RecordConverter, ValidationFn
from ..ports.entity_persistence_dao import EntityPersistenceDAO, ResolveCallback
from ..ports.logger import LoggerPort
from ..ports.metrics import MetricsPort
from ..ports.serializer import Serializer, SerializerFactory
from .config import LogContext
from .in_memory_metrics import InMemoryMetrics
from .serialization import SerializationFactory
from .simple_logger import SimpleLogger


def accept_all(record: Any) -> bool:
    """Default validation: every record that deserializes is trusted."""
    return True


class _KeyGate:
    """Orders writes for one key.

    Each write takes a ticket. Holding the lock, a write whose ticket is no
    longer the latest skips itself: a newer write for the key is queued.
    """

    __slots__ = ("latest", "lock", "users")

    def __init__(self) -> None:
        self.lock = asyncio.Lock()
        self.latest = 0
        self.users = 0


class SerializedEntityPersistence(EntityPersistenceDAO):
    """Base DAO that stores one serialized record per key."""

    def __init__(
        self,
        entity_type: str,
        logger: LoggerPort | None = None,
        metrics: MetricsPort | None = None,
    ):
        """Initialize the DAO.

        Args:
            entity_type: Namespace of the persisted entity type, used in logs
            logger: Optional logger port. If not provided, uses simple logger.
            metrics: Optional metrics port. If not provided, uses in-memory metrics.
        """
        self._entity_type = entity_type
        self._logger = logger or SimpleLogger("entity_persistence.dao")
        self._metrics = metrics or InMemoryMetrics()
        self._serializer_factory: SerializerFactory = SerializationFactory.for_dicts()
        self._serializer: Serializer | None = None
        self._is_valid: ValidationFn = accept_all
        self._converter: RecordConverter | None = None
        self._gates: dict[str, _KeyGate] = {}
        self._last_load_skipped = 0
        self._log_ctx = LogContext(entity_type=entity_type, component=type(self).__name__)

    # Raw storage primitives
    @abstractmethod
    async def _list_keys(self) -> list[str]:
        """List every stored key."""
        ...

    @abstractmethod
    async def _read_raw(self, key: str) -> bytes | None:
        """Read the stored bytes for a key, None if absent."""
        ...

    @abstractmethod
    async def _write_raw(self, key: str, data: bytes) -> None:
        """Replace the stored bytes for a key."""
        ...

    @abstractmethod
    async def _delete_raw(self, key: str) -> bool:
        """Delete the stored bytes for a key. Returns False if absent."""
        ...

    async def _exists(self, key: str) -> bool:
        return await self._read_raw(key) is not None

    # Configuration
    def set_serializer_factory(self, serializer_factory: SerializerFactory) -> SerializedEntityPersistence:
        self._serializer_factory = serializer_factory
        self._serializer = None
        return self

    def set_serial_type_validation(self, is_valid: ValidationFn) -> SerializedEntityPersistence:
        self._is_valid = is_valid
        return self

    def set_converter(self, converter: RecordConverter) -> SerializedEntityPersistence:
        self._converter = converter
        return self

    @property
    def serializer(self) -> Serializer:
        """The serializer created from the configured factory."""
        if self._serializer is None:
            self._serializer = self._serializer_factory.create()
        return self._serializer

    @property
    def entity_type(self) -> str:
        return self._entity_type

    @property
    def last_load_skipped(self) -> int:
        """Number of records skipped by the most recent load_stored()."""
        return self._last_load_skipped

    # Record encoding
    def _encode(self, entity: Entity[Any]) -> bytes:
        record = entity.data
        if self._converter is not None:
            try:
                record = self._converter.to_record(record)
            except Exception as e:
                raise SerializationError(f"Failed to convert payload to record: {e}") from e
        return self.serializer.serialize(record)

    def _decode(self, key: str, raw: bytes) -> Any:
        record = self.serializer.deserialize(raw)
        try:
            valid = self._is_valid(record)
        except Exception as e:
            raise RecordValidationError(key, f"validation raised {type(e).__name__}: {e}") from e
        if not valid:
            raise RecordValidationError(key)
        if self._converter is None:
            return record
        try:
            return self._converter.from_record(record)
        except Exception as e:
            raise SerializationError(f"Failed to convert record for key '{key}': {e}") from e

    # Operations
    async def load_stored(self) -> list[ResolveSucceeded[Any]]:
        """Load every stored record, skipping the ones that fail to decode."""
        log_ctx = self._log_ctx.with_operation("load_stored")
        loaded: list[ResolveSucceeded[Any]] = []
        skipped = 0

        with self._metrics.timer("persistence.load.duration_ms"):
            for key in await self._list_keys():
                try:
                    raw = await self._read_raw(key)
                    if raw is None:
                        # Listed but unreadable under its key: a foreign file
                        # name or a record deleted after listing
                        raise RecordValidationError(key, "listed record could not be read back")
                    loaded.append(ResolveSucceeded(key=key, data=self._decode(key, raw)))
                except Exception as e:
                    skipped += 1
                    self._logger.warning(
                        f"Skipping stored record '{key}': {e}",
                        **log_ctx.with_operation("load_stored", key=key).with_error(e).to_dict(),
                    )

        self._last_load_skipped = skipped
        self._metrics.increment("persistence.load.loaded", len(loaded))
        self._metrics.increment("persistence.load.skipped", skipped)
        self._metrics.gauge("persistence.load.stored_records", len(loaded) + skipped)
        self._logger.info(
            f"Loaded {len(loaded)} stored entities ({skipped} skipped)",
            loaded=len(loaded),
            skipped=skipped,
            **log_ctx.to_dict(),
        )
        return loaded

    def resolve(
        self, key: str, callback: ResolveCallback | None = None
    ) -> asyncio.Task[ResolveResult[Any]]:
        task = asyncio.get_running_loop().create_task(self._resolve(key), name=f"resolve:{key}")
        if callback is not None:
            task.add_done_callback(callback)
        return task

    async def _resolve(self, key: str) -> ResolveResult[Any]:
        raw = await self._read_raw(key)
        if raw is None:
            self._metrics.increment("persistence.resolve.miss")
            return ResolveResult.miss(key)
        result = ResolveResult.hit(key, self._decode(key, raw))
        self._metrics.increment("persistence.resolve.hit")
        return result

    async def store(self, entity: Entity[Any], key: str) -> OperationResult:
        start = time.perf_counter()
        try:
            # Snapshot the payload now; later changes belong to later stores
            data = self._encode(entity)
        except SerializationError:
            self._metrics.increment("persistence.store.error")
            raise

        gate, ticket = self._take_ticket(key)
        try:
            async with gate.lock:
                if ticket < gate.latest:
                    self._metrics.increment("persistence.store.superseded")
                    self._logger.debug(
                        f"Store for '{key}' superseded by a later write",
                        **self._log_ctx.with_operation("store", key=key).to_dict(),
                    )
                    return OperationResult.succeeded(
                        key, PersistenceOperation.STORE, superseded=True, duration_ms=_elapsed(start)
                    )
                try:
                    await self._write_raw(key, data)
                except Exception as e:
                    self._metrics.increment("persistence.store.error")
                    raise StoreError(key, str(e)) from e
        finally:
            self._return_ticket(key, gate)

        self._metrics.increment("persistence.store.success")
        return OperationResult.succeeded(key, PersistenceOperation.STORE, duration_ms=_elapsed(start))

    async def remove(self, key: str) -> OperationResult:
        start = time.perf_counter()
        gate, ticket = self._take_ticket(key)
        try:
            async with gate.lock:
                if ticket < gate.latest:
                    self._metrics.increment("persistence.remove.superseded")
                    return OperationResult.succeeded(
                        key, PersistenceOperation.REMOVE, superseded=True, duration_ms=_elapsed(start)
                    )
                try:
                    existed = await self._delete_raw(key)
                except Exception as e:
                    self._metrics.increment("persistence.remove.error")
                    raise RemoveError(key, str(e)) from e
        finally:
            self._return_ticket(key, gate)

        if not existed:
            self._logger.debug(
                f"Remove for '{key}' found no stored record",
                **self._log_ctx.with_operation("remove", key=key).to_dict(),
            )
        self._metrics.increment("persistence.remove.success")
        return OperationResult.succeeded(key, PersistenceOperation.REMOVE, duration_ms=_elapsed(start))

    async def get_persistence_info(self, key: str) -> PersistenceInfo:
        return PersistenceInfo(key=key, is_stored=await self._exists(key))

    # Per-key write ordering
    def _take_ticket(self, key: str) -> tuple[_KeyGate, int]:
        gate = self._gates.get(key)
        if gate is None:
            gate = self._gates[key] = _KeyGate()
        gate.users += 1
        gate.latest += 1
        return gate, gate.latest

    def _return_ticket(self, key: str, gate: _KeyGate) -> None:
        gate.users -= 1
        if gate.users == 0 and self._gates.get(key) is gate:
            del self._gates[key]


def _elapsed(start: float) -> float:
    return (time.perf_counter() - start) * 1000
