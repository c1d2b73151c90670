"""Infrastructure layer - Concrete implementations of ports."""

from .config import LogContext, PersistenceConfig
from .fs_directory_persistence import FSDirectoryPersistence
from .in_memory_entity_store import InMemoryEntityStore
from .in_memory_metrics import InMemoryMetrics
from .in_memory_persistence import InMemoryEntityPersistence
from .key_sanitizer import KeySanitizer
from .serialization import (
    DictJSONSerializer,
    DictMsgpackSerializer,
    PydanticJSONSerializer,
    PydanticMsgpackSerializer,
    SerializationFactory,
)
from .serialized_persistence import SerializedEntityPersistence
from .simple_logger import SimpleLogger

__all__ = [
    "DictJSONSerializer",
    "DictMsgpackSerializer",
    "FSDirectoryPersistence",
    "InMemoryEntityPersistence",
    "InMemoryEntityStore",
    "InMemoryMetrics",
    "KeySanitizer",
    "LogContext",
    "PersistenceConfig",
    "PydanticJSONSerializer",
    "PydanticMsgpackSerializer",
    "SerializationFactory",
    "SerializedEntityPersistence",
    "SimpleLogger",
]
