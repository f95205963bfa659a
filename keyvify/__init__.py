"""keyvify - one async key-value contract over SQL, MongoDB and SQLite."""

from keyvify.backends import (
    BackendAdapter,
    EmbeddedSQLiteBackend,
    MemoryBackend,
    MongoBackend,
    SQLAlchemyBackend,
    create_backend,
)
from keyvify.core import (
    MISSING,
    CacheBackend,
    CacheEntry,
    InvalidConfigError,
    InvalidDialectError,
    InvalidKeyError,
    InvalidParametersError,
    InvalidStoreNameError,
    KeyvifyError,
    LRUMemoryCache,
    MemoryCache,
    NoKeyError,
    NoStorageError,
    NoStoreNameError,
    NoValueError,
    Pair,
    SerializationError,
    StoreConfig,
    StoreEvent,
    TTLMemoryCache,
    ValueNotObjectError,
)
from keyvify.store import KeyValueStore, create_store

__version__ = "0.1.0"

__all__ = [
    # Version
    "__version__",
    # Store
    "KeyValueStore",
    "create_store",
    "StoreConfig",
    "StoreEvent",
    "Pair",
    "MISSING",
    # Cache
    "CacheBackend",
    "CacheEntry",
    "MemoryCache",
    "LRUMemoryCache",
    "TTLMemoryCache",
    # Backends
    "BackendAdapter",
    "SQLAlchemyBackend",
    "EmbeddedSQLiteBackend",
    "MongoBackend",
    "MemoryBackend",
    "create_backend",
    # Exceptions
    "KeyvifyError",
    "NoKeyError",
    "InvalidKeyError",
    "NoValueError",
    "ValueNotObjectError",
    "InvalidParametersError",
    "NoStoreNameError",
    "InvalidStoreNameError",
    "InvalidDialectError",
    "NoStorageError",
    "InvalidConfigError",
    "SerializationError",
]
