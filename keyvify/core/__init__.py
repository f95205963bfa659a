"""Core abstractions and models."""

from keyvify.core.cache import CacheBackend, LRUMemoryCache, MemoryCache, TTLMemoryCache
from keyvify.core.config import SUPPORTED_DIALECTS, StoreConfig, load_config
from keyvify.core.events import EventBus
from keyvify.core.exceptions import (
    InvalidConfigError,
    InvalidDialectError,
    InvalidKeyError,
    InvalidParametersError,
    InvalidStoreNameError,
    KeyvifyError,
    NoKeyError,
    NoStorageError,
    NoStoreNameError,
    NoValueError,
    SerializationError,
    ValueNotObjectError,
)
from keyvify.core.models import MISSING, CacheEntry, KeyParam, Pair, StoreEvent

__all__ = [
    # Cache
    "CacheBackend",
    "MemoryCache",
    "LRUMemoryCache",
    "TTLMemoryCache",
    # Config
    "StoreConfig",
    "SUPPORTED_DIALECTS",
    "load_config",
    # Events
    "EventBus",
    "StoreEvent",
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
    # Models
    "MISSING",
    "Pair",
    "CacheEntry",
    "KeyParam",
]
