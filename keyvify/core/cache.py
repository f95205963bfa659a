"""In-process cache backends.

A cache maps a key to the last-known serialized value of its record. Caches
are synchronous and never raise; the store treats them as a latency-reducing
shadow of the backend.
"""

from abc import ABC, abstractmethod
from typing import Optional

from cachetools import LRUCache, TTLCache

from keyvify.core.models import CacheEntry


class CacheBackend(ABC):
    """Abstract base class for in-process record caches."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Retrieve a raw value from cache.

        Args:
            key: Record key

        Returns:
            Serialized value or None if not cached
        """
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store a raw value in cache.

        Args:
            key: Record key
            value: Serialized value
        """
        pass

    @abstractmethod
    def delete(self, key: str) -> None:
        """Drop a key from cache. Missing keys are ignored.

        Args:
            key: Record key
        """
        pass

    @abstractmethod
    def empty(self) -> None:
        """Drop every cached entry."""
        pass

    @abstractmethod
    def entries(self) -> list[CacheEntry]:
        """Return a snapshot of the cached entries."""
        pass

    def __len__(self) -> int:
        return len(self.entries())


class MemoryCache(CacheBackend):
    """Unbounded dict-backed cache. The default."""

    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def empty(self) -> None:
        self._data.clear()

    def entries(self) -> list[CacheEntry]:
        return [CacheEntry(key=k, value=v) for k, v in self._data.items()]

    def __len__(self) -> int:
        return len(self._data)


class LRUMemoryCache(MemoryCache):
    """Size-bounded cache evicting the least recently used key."""

    def __init__(self, maxsize: int = 1000) -> None:
        """Initialize cache.

        Args:
            maxsize: Maximum number of cached keys
        """
        self.maxsize = maxsize
        self._data = LRUCache(maxsize=maxsize)


class TTLMemoryCache(MemoryCache):
    """Cache whose entries expire ``ttl`` seconds after being written."""

    def __init__(self, maxsize: int = 1000, ttl: float = 300) -> None:
        """Initialize cache.

        Args:
            maxsize: Maximum number of cached keys
            ttl: Entry lifetime in seconds
        """
        self.maxsize = maxsize
        self.ttl = ttl
        self._data = TTLCache(maxsize=maxsize, ttl=ttl)

    def entries(self) -> list[CacheEntry]:
        self._data.expire()
        snapshot = []
        for k in list(self._data.keys()):
            value = self._data.get(k)
            if value is not None:
                snapshot.append(CacheEntry(key=k, value=value))
        return snapshot
