"""Document backend on MongoDB via pymongo's asyncio client.

Each store owns one collection of ``{"key": ..., "value": ...}`` documents
with a unique index on ``key``.
"""

import logging
from typing import Any, Optional

try:
    from pymongo import ASCENDING, AsyncMongoClient
    from pymongo.asynchronous.database import AsyncDatabase
    from pymongo.errors import ConfigurationError
except ImportError as e:
    raise ImportError(
        "MongoBackend requires optional dependencies. "
        "Install with: pip install keyvify[mongo]"
    ) from e

from keyvify.backends.base import BackendAdapter

logger = logging.getLogger(__name__)

DEFAULT_DATABASE = "keyvify"


class MongoBackend(BackendAdapter):
    """MongoDB collection backend.

    Example:
        ```python
        backend = MongoBackend("settings", uri="mongodb://localhost:27017/app")
        await backend.connect()
        await backend.upsert("theme", '"dark"')
        await backend.close()
        ```

    Args:
        name: Collection name
        uri: MongoDB connection string (ignored when ``client`` or ``database`` is given)
        client: Existing async client; the caller keeps ownership of it
        database: Existing async database, or a database name
    """

    kind = "document"

    def __init__(
        self,
        name: str,
        uri: Optional[str] = None,
        client: Optional[AsyncMongoClient] = None,
        database: AsyncDatabase | str | None = None,
    ) -> None:
        super().__init__(name)
        if uri is None and client is None and not isinstance(database, AsyncDatabase):
            raise ValueError("MongoBackend requires a uri, a client, or a database")

        self._owns_client = client is None and not isinstance(database, AsyncDatabase)
        if isinstance(database, AsyncDatabase):
            self.db = database
            self.client = database.client
        else:
            self.client = client if client is not None else AsyncMongoClient(uri)
            self.db = self._select_database(self.client, database)
        self.collection = self.db[name]

    @staticmethod
    def _select_database(client: AsyncMongoClient, database: Optional[str]) -> AsyncDatabase:
        if database:
            return client[database]
        try:
            return client.get_default_database()
        except ConfigurationError:
            return client[DEFAULT_DATABASE]

    async def connect(self) -> None:
        await self.collection.create_index([("key", ASCENDING)], unique=True)
        logger.info(f"Connected collection {self.name!r} in database {self.db.name!r}")

    async def point_get(self, key: str) -> Optional[str]:
        doc = await self.collection.find_one({"key": key}, {"_id": 0, "value": 1})
        if not doc:
            return None
        return doc.get("value")

    async def upsert(self, key: str, value: str) -> None:
        await self.collection.update_one({"key": key}, {"$set": {"value": value}}, upsert=True)

    async def point_delete(self, key: str) -> int:
        result = await self.collection.delete_one({"key": key})
        return result.deleted_count

    async def scan_all(self) -> list[tuple[str, str]]:
        pairs: list[tuple[str, str]] = []
        async for doc in self.collection.find({}, {"_id": 0, "key": 1, "value": 1}):
            if doc.get("value") is not None:
                pairs.append((doc["key"], doc["value"]))
        return pairs

    async def truncate_all(self) -> int:
        result = await self.collection.delete_many({})
        return result.deleted_count

    async def close(self) -> None:
        if self._owns_client:
            await self.client.close()
            logger.info(f"Closed client for collection {self.name!r}")

    def __repr__(self) -> str:
        return f"MongoBackend(name={self.name!r}, database={getattr(self.db, 'name', None)!r})"
