"""Key-value store façade.

:class:`KeyValueStore` puts the ``get``/``set``/``delete``/``all``/``truncate``
contract on top of any :class:`~keyvify.backends.base.BackendAdapter`, with a
write-through in-process cache and dot-notation access into object values.

Consistency rules:

- Reads consult the cache first; a backend hit populates the cache.
- Writes go to the backend first and only then to the cache, so a failing
  backend call never leaves a value in the cache that the backend lacks.
- ``all``, ``truncate`` and ``empty`` invalidate the whole cache; ``all``
  repopulates it from the scan.

``set`` is a read-modify-write. By default concurrent writers to the same key
race (last upsert wins); pass ``serialize_writes=True`` to queue writes per key.
"""

import asyncio
import logging
from collections.abc import AsyncIterator, Mapping
from contextlib import asynccontextmanager
from typing import Any, Callable, Optional, Union

from keyvify.backends.base import BackendAdapter
from keyvify.backends.factory import create_backend
from keyvify.core import codec, paths
from keyvify.core.cache import CacheBackend, MemoryCache
from keyvify.core.config import StoreConfig, load_config
from keyvify.core.events import EventBus, Handler
from keyvify.core.exceptions import (
    InvalidConfigError,
    InvalidParametersError,
    NoValueError,
    SerializationError,
    ValueNotObjectError,
)
from keyvify.core.keys import resolve_key_param, validate_key, validate_store_name
from keyvify.core.models import MISSING, CacheEntry, KeyParam, Pair, StoreEvent

logger = logging.getLogger(__name__)


def _build_cache(option: Any) -> Optional[CacheBackend]:
    if option is False:
        return None
    if option is True:
        return MemoryCache()
    if isinstance(option, CacheBackend):
        return option
    cache = option()
    if not isinstance(cache, CacheBackend):
        raise InvalidConfigError(f"Cache factory returned {type(cache).__name__}, expected a CacheBackend")
    return cache


class _KeyLocks:
    """Per-key asyncio locks, dropped once no task holds or awaits them."""

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}
        self._users: dict[str, int] = {}

    @asynccontextmanager
    async def hold(self, key: str) -> AsyncIterator[None]:
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._users[key] = self._users.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._users[key] -= 1
            if not self._users[key]:
                del self._users[key]
                del self._locks[key]

    def __len__(self) -> int:
        return len(self._locks)


class KeyValueStore:
    """Key-value store over a pluggable backend.

    Example:
        ```python
        store = KeyValueStore("settings", {"dialect": "embedded", "storage": "data/app.db"})
        async with store:
            await store.set("user", {"name": "Ada", "prefs": {"theme": "light"}})
            await store.set(("user", "prefs.theme"), "dark")
            pair = await store.get(("user", "prefs.theme"))
            assert pair.value == "dark"
        ```

    Args:
        name: Store name, used as the table or collection name
        config: A :class:`StoreConfig` or a mapping of its fields
        **options: Individual config fields; they override ``config``

    Raises:
        NoStoreNameError: If ``name`` is empty
        InvalidStoreNameError: If ``name`` is not a plain identifier
        InvalidConfigError: If the configuration is invalid
        InvalidDialectError: If the dialect cannot be resolved
    """

    def __init__(
        self,
        name: str,
        config: Union[StoreConfig, Mapping[str, Any], None] = None,
        **options: Any,
    ) -> None:
        self._name = validate_store_name(name)

        if isinstance(config, StoreConfig):
            values = dict(config) if options else None
        else:
            values = dict(config or {})
        if values is not None:
            values.update(options)
            config = load_config(values)
        self.config: StoreConfig = config

        self.backend: BackendAdapter = create_backend(self._name, self.config)
        self._cache = _build_cache(self.config.cache)
        self.serializer: Callable[[Any], str] = self.config.serializer or codec.serialize
        self.deserializer: Callable[[str], Any] = self.config.deserializer or codec.deserialize
        self.events = EventBus()
        self._connected = False
        self._locks = _KeyLocks() if self.config.serialize_writes else None

    @property
    def name(self) -> str:
        return self._name

    @property
    def dialect(self) -> str:
        """Kind of backend: ``relational``, ``document``, ``embedded`` or ``memory``."""
        return self.backend.kind

    @property
    def connected(self) -> bool:
        return self._connected

    @property
    def cache(self) -> Optional[CacheBackend]:
        return self._cache

    def on(self, event: Union[StoreEvent, str], handler: Handler) -> Callable[[], None]:
        """Subscribe ``handler`` to ``event``. See :mod:`keyvify.core.events`."""
        return self.events.subscribe(event, handler)

    def off(self, event: Union[StoreEvent, str], handler: Handler) -> None:
        self.events.unsubscribe(event, handler)

    async def connect(self) -> None:
        """Open the backend and provision its table or collection."""
        await self.backend.connect()
        self._connected = True
        logger.info(f"Store {self._name!r} connected ({self.dialect})")
        self.events.emit(StoreEvent.CONNECT)

    async def disconnect(self) -> None:
        """Close the backend. The cache is left as-is."""
        await self.backend.close()
        self._connected = False
        logger.info(f"Store {self._name!r} disconnected")
        self.events.emit(StoreEvent.DISCONNECT)

    async def get(self, kpar: KeyParam) -> Pair:
        """Read a value, or a nested field of an object value.

        Args:
            kpar: A key, or a ``(key, "dotted.path")`` pair

        Returns:
            Pair whose value is ``MISSING`` when nothing is stored

        Raises:
            InvalidParametersError: If ``kpar`` has the wrong shape
            NoKeyError: If the key is empty
            InvalidKeyError: If the key or path is malformed
            ValueNotObjectError: If a path is given and the value is not an object
        """
        key, path = resolve_key_param(kpar)
        value = await self._read(key)
        if path:
            if not paths.is_object(value):
                raise ValueNotObjectError()
            value = paths.get_key(value, path)

        pair = Pair(key=key, value=value)
        self.events.emit(StoreEvent.VALUE_GET, pair)
        return pair

    async def set(self, kpar: KeyParam, value: Any) -> Pair:
        """Write a value, or a nested field of an object value.

        The previous value is read first; it becomes ``Pair.old`` and decides
        between the ``valueSet`` and ``valueUpdate`` events.

        Args:
            kpar: A key, or a ``(key, "dotted.path")`` pair
            value: The new value (or nested field value)

        Returns:
            Pair describing the new whole value, with ``old`` when one existed

        Raises:
            NoValueError: If ``value`` is ``MISSING``
            ValueNotObjectError: If a path is given and the stored value (or an
                intermediate field) is not an object
        """
        key, path = resolve_key_param(kpar)
        if value is MISSING:
            raise NoValueError()

        async with self._write_guard(key):
            old = await self._read(key)
            if path:
                if not paths.is_object(old):
                    raise ValueNotObjectError()
                value = paths.set_key(old, path, value)
            return await self._write(key, value, old)

    async def unset(self, kpar: KeyParam) -> Pair:
        """Remove a nested field from an object value.

        Args:
            kpar: A ``(key, "dotted.path")`` pair

        Returns:
            Pair describing the new whole value, with ``old`` attached

        Raises:
            InvalidParametersError: If no path is given
            ValueNotObjectError: If the stored value is not an object
        """
        key, path = resolve_key_param(kpar)
        if not path:
            raise InvalidParametersError("unset requires a (key, path) pair; use delete() for whole records")

        async with self._write_guard(key):
            old = await self._read(key)
            if not paths.is_object(old):
                raise ValueNotObjectError()
            value, removed = paths.delete_key(old, path)
            if not removed:
                logger.debug(f"Nothing to unset at {key!r}:{path!r}")
            return await self._write(key, value, old)

    async def delete(self, key: str) -> int:
        """Delete a record.

        Deleting a missing key is not an error.

        Returns:
            Number of records removed
        """
        key = validate_key(key)
        async with self._write_guard(key):
            removed = await self.backend.point_delete(key)
            if self._cache is not None:
                self._cache.delete(key)
        self.events.emit(StoreEvent.VALUE_DELETE, key, removed)
        return removed

    async def all(self) -> list[Pair]:
        """Fetch every record and resynchronize the cache with the backend.

        Returns:
            Pairs in backend order
        """
        rows = await self.backend.scan_all()
        pairs = [Pair(key=key, value=self.deserializer(raw)) for key, raw in rows]

        if self._cache is not None:
            self._cache.empty()
            for key, raw in rows:
                self._cache.set(key, raw)

        self.events.emit(StoreEvent.VALUE_FETCH, pairs)
        return pairs

    async def truncate(self) -> int:
        """Delete every record and empty the cache.

        Returns:
            Number of records removed
        """
        removed = await self.backend.truncate_all()
        if self._cache is not None:
            self._cache.empty()
        logger.debug(f"Truncated {removed} record(s) from {self._name!r}")
        self.events.emit(StoreEvent.TRUNCATE, removed)
        return removed

    def entries(self) -> list[CacheEntry]:
        """Snapshot of the cache. Never touches the backend."""
        if self._cache is None:
            return []
        return list(self._cache.entries())

    def empty(self) -> None:
        """Drop every cached entry, leaving the backend untouched."""
        if self._cache is not None:
            self._cache.empty()

    async def _read_raw(self, key: str) -> Optional[str]:
        if self._cache is not None:
            raw = self._cache.get(key)
            if raw is not None:
                logger.debug(f"Cache hit for {key!r}")
                return raw

        raw = await self.backend.point_get(key)
        if raw is not None and self._cache is not None:
            logger.debug(f"Cache miss for {key!r}; populated from backend")
            self._cache.set(key, raw)
        return raw

    async def _read(self, key: str) -> Any:
        return codec.decode_raw(await self._read_raw(key), self.deserializer)

    async def _write(self, key: str, value: Any, old: Any) -> Pair:
        raw = self.serializer(value)
        if not isinstance(raw, str):
            raise SerializationError(f"Serializer returned {type(raw).__name__}, expected str")

        await self.backend.upsert(key, raw)
        if self._cache is not None:
            self._cache.set(key, raw)

        pair = Pair(key=key, value=self.deserializer(raw), old=old)
        self.events.emit(StoreEvent.VALUE_UPDATE if pair.has_old else StoreEvent.VALUE_SET, pair)
        return pair

    @asynccontextmanager
    async def _write_guard(self, key: str) -> AsyncIterator[None]:
        if self._locks is None:
            yield
            return
        async with self._locks.hold(key):
            yield

    async def __aenter__(self) -> "KeyValueStore":
        """Async context manager entry."""
        await self.connect()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        await self.disconnect()

    def __repr__(self) -> str:
        return f"KeyValueStore(name={self._name!r}, dialect={self.dialect!r}, connected={self._connected})"


def create_store(
    name: str,
    config: Union[StoreConfig, Mapping[str, Any], None] = None,
    **options: Any,
) -> KeyValueStore:
    """Factory function to create a :class:`KeyValueStore`.

    Example:
        ```python
        from keyvify import create_store

        store = create_store("sessions", dialect="postgres", host="db", database="app")
        await store.connect()
        ```
    """
    return KeyValueStore(name, config, **options)
