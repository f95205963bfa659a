"""Resolve a store configuration into a backend adapter.

The dialect is resolved once, at construction. A string names the kind of
store to open; a live handle is wrapped by the adapter of its kind; an
adapter instance is used as-is.
"""

import logging
import sqlite3
from typing import Any, Optional
from urllib.parse import quote_plus

from sqlalchemy.ext.asyncio import AsyncEngine

from keyvify.backends.base import BackendAdapter
from keyvify.backends.embedded_backend import EmbeddedSQLiteBackend
from keyvify.backends.memory_backend import MemoryBackend
from keyvify.backends.sql_backend import SQLAlchemyBackend, build_url
from keyvify.core.config import SQL_DIALECTS, StoreConfig
from keyvify.core.exceptions import InvalidDialectError, NoStorageError

logger = logging.getLogger(__name__)


def _is_mongo_handle(handle: Any) -> bool:
    return type(handle).__module__.split(".")[0] == "pymongo"


def _mongo_uri(config: StoreConfig) -> Optional[str]:
    if config.uri:
        return config.uri
    if not config.host:
        return None
    auth = ""
    if config.username:
        auth = quote_plus(config.username)
        if config.password:
            auth += ":" + quote_plus(config.password)
        auth += "@"
    port = f":{config.port}" if config.port else ""
    return f"mongodb://{auth}{config.host}{port}/"


def create_backend(name: str, config: StoreConfig) -> BackendAdapter:
    """Build the adapter described by ``config``.

    Args:
        name: Table or collection name
        config: Validated store configuration

    Returns:
        An unconnected backend adapter

    Raises:
        InvalidDialectError: If the dialect cannot be resolved
        NoStorageError: If a file-backed dialect has no storage path
    """
    dialect = config.dialect

    if isinstance(dialect, BackendAdapter):
        return dialect

    if isinstance(dialect, AsyncEngine):
        return SQLAlchemyBackend(name, engine=dialect, connect_retries=config.connect_retries)

    if isinstance(dialect, sqlite3.Connection):
        return EmbeddedSQLiteBackend(name, connection=dialect)

    if _is_mongo_handle(dialect):
        from keyvify.backends.mongo_backend import AsyncDatabase, MongoBackend

        if isinstance(dialect, AsyncDatabase):
            return MongoBackend(name, database=dialect)
        return MongoBackend(name, client=dialect, database=config.database)

    if dialect in SQL_DIALECTS:
        if config.uri:
            url: Any = config.uri
        else:
            url = build_url(
                dialect,
                storage=config.storage,
                host=config.host,
                port=config.port,
                username=config.username,
                password=config.password,
                database=config.database,
            )
        logger.debug(f"Resolved dialect {dialect!r} to a relational backend")
        return SQLAlchemyBackend(
            name,
            database_url=url,
            pool_size=config.pool_size,
            connect_retries=config.connect_retries,
            echo=config.echo,
        )

    if dialect == "mongodb":
        from keyvify.backends.mongo_backend import MongoBackend

        uri = _mongo_uri(config)
        if uri is None:
            raise InvalidDialectError("mongodb (requires uri or host)")
        return MongoBackend(name, uri=uri, database=config.database)

    if dialect == "embedded":
        if not config.storage:
            raise NoStorageError()
        return EmbeddedSQLiteBackend(name, storage=config.storage)

    if dialect == "memory":
        return MemoryBackend(name)

    raise InvalidDialectError(dialect)
