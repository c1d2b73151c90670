"""In-memory implementation of the entity persistence DAO.

This is an infrastructure adapter for testing and development. Records are
kept as serialized bytes, so they still round-trip through the configured
serializer exactly as they would on disk.
"""

from ..ports.logger import LoggerPort
from ..ports.metrics import MetricsPort
from .serialized_persistence import SerializedEntityPersistence


class InMemoryEntityPersistence(SerializedEntityPersistence):
    """DAO over a plain ``dict[str, bytes]``.

    Pass the same ``records`` dict to several instances to simulate a
    restart over one backing store.
    """

    def __init__(
        self,
        records: dict[str, bytes] | None = None,
        entity_type: str = "in_memory",
        logger: LoggerPort | None = None,
        metrics: MetricsPort | None = None,
    ) -> None:
        self._records: dict[str, bytes] = records if records is not None else {}
        super().__init__(entity_type, logger=logger, metrics=metrics)

    @property
    def records(self) -> dict[str, bytes]:
        """The backing store (useful for testing)."""
        return self._records

    async def _list_keys(self) -> list[str]:
        return list(self._records)

    async def _read_raw(self, key: str) -> bytes | None:
        return self._records.get(key)

    async def _write_raw(self, key: str, data: bytes) -> None:
        self._records[key] = data

    async def _delete_raw(self, key: str) -> bool:
        return self._records.pop(key, None) is not None

    async def _exists(self, key: str) -> bool:
        return key in self._records
