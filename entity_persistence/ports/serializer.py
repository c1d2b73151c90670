"""Serializer ports - how records are turned into bytes and back."""

from abc import ABC, abstractmethod
from typing import Any


class Serializer(ABC):
    """Converts one stored record type to bytes and back.

    Implementations raise ``SerializationError`` on any failure.
    """

    #: File extension (with leading dot) used by file-based backends
    file_extension: str = ".bin"

    @abstractmethod
    def serialize(self, record: Any) -> bytes:
        """Serialize a record to bytes."""
        ...

    @abstractmethod
    def deserialize(self, data: bytes) -> Any:
        """Deserialize bytes to a record."""
        ...


class SerializerFactory(ABC):
    """Creates serializers for a persisted record type."""

    @abstractmethod
    def create(self) -> Serializer:
        """Create a serializer instance."""
        ...
