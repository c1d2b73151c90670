"""Serialization utilities and record serializers for JSON and MessagePack."""

from __future__ import annotations

import json
from typing import Any, TypeVar

import msgpack
from pydantic import BaseModel

from ..domain.exceptions import SerializationError
from ..ports.serializer import Serializer, SerializerFactory

T = TypeVar("T", bound=BaseModel)


def serialize_to_msgpack(obj: BaseModel) -> bytes:
    """Serialize a Pydantic model to MessagePack bytes."""
    try:
        # Convert to dict first, handling datetime objects
        data = obj.model_dump(mode="json")
        return bytes(msgpack.packb(data, use_bin_type=True))
    except Exception as e:
        raise SerializationError(f"Failed to serialize to msgpack: {e}") from e


def deserialize_from_msgpack(data: bytes, model_class: type[T]) -> T:
    """Deserialize MessagePack bytes to a Pydantic model."""
    try:
        unpacked = msgpack.unpackb(data, raw=False)
        if not isinstance(unpacked, dict):
            raise SerializationError(f"Expected a msgpack map, got {type(unpacked).__name__}")
        return model_class.model_validate(unpacked)
    except SerializationError:
        raise
    except Exception as e:
        raise SerializationError(f"Failed to deserialize from msgpack: {e}") from e


def serialize_to_json(obj: BaseModel) -> bytes:
    """Serialize a Pydantic model to JSON bytes."""
    try:
        return obj.model_dump_json().encode()
    except Exception as e:
        raise SerializationError(f"Failed to serialize to JSON: {e}") from e


def deserialize_from_json(data: bytes, model_class: type[T]) -> T:
    """Deserialize JSON bytes to a Pydantic model."""
    try:
        json_str = data.decode() if isinstance(data, bytes) else data
        if not json_str or json_str.isspace():
            raise SerializationError("Empty or whitespace-only JSON data")
        return model_class.model_validate(json.loads(json_str))
    except SerializationError:
        raise
    except json.JSONDecodeError as e:
        raise SerializationError(f"Invalid JSON format: {e}") from e
    except Exception as e:
        raise SerializationError(f"Failed to deserialize from JSON: {e}") from e


def serialize_dict(data: dict[str, Any], use_msgpack: bool = True) -> bytes:
    """Serialize a dictionary, handling Python objects."""
    if not isinstance(data, dict):
        raise SerializationError(f"Expected a dict, got {type(data).__name__}")
    try:
        if use_msgpack:
            # Use default=str to handle datetime and other non-serializable objects
            return bytes(msgpack.packb(data, use_bin_type=True, default=str))
        else:
            return json.dumps(data, default=str, sort_keys=True).encode()
    except Exception as e:
        raise SerializationError(f"Failed to serialize dict: {e}") from e


def deserialize_dict(data: bytes, use_msgpack: bool = True) -> dict[str, Any]:
    """Deserialize bytes produced by serialize_dict."""
    if not data:
        raise SerializationError("Empty data received")
    try:
        if use_msgpack:
            result = msgpack.unpackb(data, raw=False)
        else:
            result = json.loads(data.decode())
    except Exception as e:
        raise SerializationError(f"Failed to deserialize dict: {e}") from e
    if not isinstance(result, dict):
        raise SerializationError(f"Expected a mapping, got {type(result).__name__}")
    return result


class PydanticJSONSerializer(Serializer):
    """JSON serializer for records that are Pydantic models."""

    file_extension = ".json"

    def __init__(self, model_class: type[BaseModel]):
        self._model_class = model_class

    def serialize(self, record: Any) -> bytes:
        """Serialize using JSON."""
        if not isinstance(record, self._model_class):
            raise SerializationError(
                f"Expected {self._model_class.__name__}, got {type(record).__name__}"
            )
        return serialize_to_json(record)

    def deserialize(self, data: bytes) -> BaseModel:
        """Deserialize from JSON."""
        return deserialize_from_json(data, self._model_class)


class PydanticMsgpackSerializer(Serializer):
    """MessagePack serializer for records that are Pydantic models."""

    file_extension = ".msgpack"

    def __init__(self, model_class: type[BaseModel]):
        self._model_class = model_class

    def serialize(self, record: Any) -> bytes:
        """Serialize using MessagePack."""
        if not isinstance(record, self._model_class):
            raise SerializationError(
                f"Expected {self._model_class.__name__}, got {type(record).__name__}"
            )
        return serialize_to_msgpack(record)

    def deserialize(self, data: bytes) -> BaseModel:
        """Deserialize from MessagePack."""
        return deserialize_from_msgpack(data, self._model_class)


class DictJSONSerializer(Serializer):
    """JSON serializer for plain dictionary records."""

    file_extension = ".json"

    def serialize(self, record: Any) -> bytes:
        return serialize_dict(record, use_msgpack=False)

    def deserialize(self, data: bytes) -> dict[str, Any]:
        return deserialize_dict(data, use_msgpack=False)


class DictMsgpackSerializer(Serializer):
    """MessagePack serializer for plain dictionary records."""

    file_extension = ".msgpack"

    def serialize(self, record: Any) -> bytes:
        return serialize_dict(record, use_msgpack=True)

    def deserialize(self, data: bytes) -> dict[str, Any]:
        return deserialize_dict(data, use_msgpack=True)


class SerializationFactory(SerializerFactory):
    """Factory for creating record serializers with consistent configuration.

    This factory is the single point of configuration for how one entity
    type's records are encoded on disk.
    """

    def __init__(self, model_class: type[BaseModel] | None = None, use_msgpack: bool = False):
        """Initialize the factory.

        Args:
            model_class: Pydantic model of the records, or None for plain dicts
            use_msgpack: Whether to use MessagePack (True) or JSON (False)
        """
        self._model_class = model_class
        self._use_msgpack = use_msgpack

    @classmethod
    def for_model(cls, model_class: type[BaseModel], use_msgpack: bool = False) -> SerializationFactory:
        """Create a factory for Pydantic model records."""
        return cls(model_class=model_class, use_msgpack=use_msgpack)

    @classmethod
    def for_dicts(cls, use_msgpack: bool = False) -> SerializationFactory:
        """Create a factory for plain dictionary records."""
        return cls(model_class=None, use_msgpack=use_msgpack)

    @property
    def use_msgpack(self) -> bool:
        return self._use_msgpack

    def create(self) -> Serializer:
        """Create a serializer based on configuration."""
        if self._model_class is None:
            return DictMsgpackSerializer() if self._use_msgpack else DictJSONSerializer()
        if self._use_msgpack:
            return PydanticMsgpackSerializer(self._model_class)
        return PydanticJSONSerializer(self._model_class)
