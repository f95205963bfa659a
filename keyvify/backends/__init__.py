"""Storage backend implementations."""

from keyvify.backends.base import BackendAdapter
from keyvify.backends.embedded_backend import EmbeddedSQLiteBackend
from keyvify.backends.factory import create_backend
from keyvify.backends.memory_backend import MemoryBackend
from keyvify.backends.sql_backend import SQLAlchemyBackend

# MongoBackend needs the optional pymongo dependency
try:
    from keyvify.backends.mongo_backend import MongoBackend
except ImportError:
    MongoBackend = None  # type: ignore[assignment,misc]

__all__ = [
    "BackendAdapter",
    "EmbeddedSQLiteBackend",
    "MemoryBackend",
    "MongoBackend",
    "SQLAlchemyBackend",
    "create_backend",
]
