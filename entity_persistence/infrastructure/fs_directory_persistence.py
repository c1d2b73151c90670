"""File-system DAO - one file per entity inside a directory."""

from __future__ import annotations

import asyncio
import contextlib
import os
import tempfile
from pathlib import Path

from ..ports.logger import LoggerPort
from ..ports.metrics import MetricsPort
from .key_sanitizer import KeySanitizer
from .serialized_persistence import SerializedEntityPersistence
from .simple_logger import SimpleLogger


class FSDirectoryPersistence(SerializedEntityPersistence):
    """File-system implementation of the entity persistence DAO.

    Each key is stored as ``{encoded key}{serializer extension}`` inside
    ``directory``. Writes go to a hidden temporary file in the same
    directory and are moved into place with ``os.replace``, so a record on
    disk is always either the old or the new version, never a torn mix.
    Blocking file I/O runs in worker threads.
    """

    TEMP_SUFFIX = ".tmp"

    def __init__(
        self,
        directory: Path | str,
        entity_type: str | None = None,
        logger: LoggerPort | None = None,
        metrics: MetricsPort | None = None,
        fsync: bool = True,
    ):
        """Initialize the DAO.

        Args:
            directory: Directory holding this entity type's records
            entity_type: Namespace used in logs (defaults to the directory name)
            logger: Optional logger port
            metrics: Optional metrics port
            fsync: Flush each record to disk before moving it into place
        """
        self._directory = Path(directory)
        self._fsync = fsync
        super().__init__(
            entity_type or self._directory.name,
            logger=logger or SimpleLogger("entity_persistence.fs"),
            metrics=metrics,
        )

    @property
    def directory(self) -> Path:
        return self._directory

    def path_for(self, key: str) -> Path:
        """Get the record path for a key."""
        return self._directory / f"{KeySanitizer.to_filename(key)}{self.serializer.file_extension}"

    async def _list_keys(self) -> list[str]:
        return await asyncio.to_thread(self._scan_keys)

    async def _read_raw(self, key: str) -> bytes | None:
        return await asyncio.to_thread(self._read_file, self.path_for(key))

    async def _write_raw(self, key: str, data: bytes) -> None:
        await asyncio.to_thread(self._write_file, self.path_for(key), data)

    async def _delete_raw(self, key: str) -> bool:
        return await asyncio.to_thread(self._delete_file, self.path_for(key))

    async def _exists(self, key: str) -> bool:
        return await asyncio.to_thread(self.path_for(key).is_file)

    # Blocking helpers, run via asyncio.to_thread
    def _scan_keys(self) -> list[str]:
        if not self._directory.is_dir():
            return []

        extension = self.serializer.file_extension
        keys = []
        for path in sorted(self._directory.iterdir()):
            name = path.name
            # Encoded keys never start with "."; hidden files are temporaries
            if name.startswith(".") or not name.endswith(extension) or not path.is_file():
                continue
            keys.append(KeySanitizer.from_filename(name[: -len(extension)]))
        return keys

    @staticmethod
    def _read_file(path: Path) -> bytes | None:
        try:
            return path.read_bytes()
        except FileNotFoundError:
            return None

    def _write_file(self, path: Path, data: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, temp_name = tempfile.mkstemp(
            dir=path.parent, prefix=f".{path.stem}.", suffix=self.TEMP_SUFFIX
        )
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
                if self._fsync:
                    f.flush()
                    os.fsync(f.fileno())
            os.replace(temp_name, path)
        except BaseException:
            with contextlib.suppress(FileNotFoundError):
                os.unlink(temp_name)
            raise

    @staticmethod
    def _delete_file(path: Path) -> bool:
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        return True
