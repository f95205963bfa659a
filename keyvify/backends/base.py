"""Base interface for storage backends."""

from abc import ABC, abstractmethod
from typing import Any, Optional


class BackendAdapter(ABC):
    """Abstract base class for storage backends.

    An adapter persists serialized records (``key -> raw string``) in one
    physical store: a SQL table, a document collection, an embedded SQLite
    file. The key-value store only ever talks to this interface, so any
    implementation is interchangeable.

    Implementations should:
    - Provision their table or collection in :meth:`connect`
    - Return ``None`` from :meth:`point_get` for missing records
    - Report how many records a delete actually removed
    - Let driver errors propagate unchanged

    Example:
        >>> class MyBackend(BackendAdapter):
        ...     async def point_get(self, key: str) -> Optional[str]:
        ...         return self.rows.get(key)
        ...     # upsert, point_delete, scan_all, truncate_all
        ...
        >>> backend = MyBackend("settings")
        >>> await backend.upsert("theme", '"dark"')
    """

    kind: str = "abstract"

    def __init__(self, name: str) -> None:
        """Initialize the backend.

        Args:
            name: Table or collection name
        """
        self.name = name

    async def connect(self) -> None:
        """Open the connection and provision the ``key``/``value`` layout.

        The default implementation does nothing.
        """
        pass

    @abstractmethod
    async def point_get(self, key: str) -> Optional[str]:
        """Look up one record.

        Args:
            key: Record key

        Returns:
            The serialized value, or None if no record exists
        """
        pass

    @abstractmethod
    async def upsert(self, key: str, value: str) -> None:
        """Insert the record, or update it if it already exists.

        Args:
            key: Record key
            value: Serialized value
        """
        pass

    @abstractmethod
    async def point_delete(self, key: str) -> int:
        """Delete one record.

        Args:
            key: Record key

        Returns:
            Number of records removed (0 when the key did not exist)
        """
        pass

    @abstractmethod
    async def scan_all(self) -> list[tuple[str, str]]:
        """Return every stored ``(key, value)`` pair, in backend order."""
        pass

    @abstractmethod
    async def truncate_all(self) -> int:
        """Delete every record.

        Returns:
            Number of records removed
        """
        pass

    async def close(self) -> None:
        """Release connections and file handles.

        Implementations that own resources should override this.
        """
        pass

    async def __aenter__(self) -> "BackendAdapter":
        """Async context manager entry."""
        await self.connect()
        return self

    async def __aexit__(self, exc_type: type, exc_val: Exception, exc_tb: Any) -> None:
        """Async context manager exit."""
        await self.close()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"
