"""Store configuration."""

import logging
import os
from typing import Any, Callable, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from keyvify.core.cache import CacheBackend
from keyvify.core.exceptions import InvalidConfigError

logger = logging.getLogger(__name__)

SQL_DIALECTS = ("sqlite", "postgres", "mysql", "mariadb", "mssql")
DOCUMENT_DIALECTS = ("mongodb",)
EMBEDDED_DIALECTS = ("embedded",)
MEMORY_DIALECTS = ("memory",)
SUPPORTED_DIALECTS = SQL_DIALECTS + DOCUMENT_DIALECTS + EMBEDDED_DIALECTS + MEMORY_DIALECTS

_FALSY = {"0", "false", "no", "off", ""}


class StoreConfig(BaseModel):
    """Configuration for a key-value store.

    ``dialect`` is either one of :data:`SUPPORTED_DIALECTS` or a live handle
    (a SQLAlchemy ``AsyncEngine``, a pymongo async client or database, or a
    ``sqlite3.Connection``) that the store will use instead of opening its own.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    dialect: Any
    uri: str | None = None
    storage: str | None = None
    host: str | None = None
    port: int | None = Field(None, ge=1, le=65535)
    username: str | None = None
    password: str | None = None
    database: str | None = None

    # Caching: True/False, a CacheBackend subclass or factory, or an instance
    cache: Any = True
    serializer: Optional[Callable[[Any], str]] = None
    deserializer: Optional[Callable[[str], Any]] = None

    # Per-key write serialization (closes the read-modify-write race)
    serialize_writes: bool = False

    # Connection tuning
    pool_size: int = Field(5, ge=1)
    connect_retries: int = Field(3, ge=1)
    echo: bool = False

    @field_validator("dialect")
    @classmethod
    def _check_dialect(cls, value: Any) -> Any:
        if value is None or value == "":
            raise ValueError("no dialect was provided")
        if isinstance(value, str) and value not in SUPPORTED_DIALECTS:
            raise ValueError(f"unsupported dialect {value!r}; expected one of {', '.join(SUPPORTED_DIALECTS)}")
        return value

    @field_validator("cache")
    @classmethod
    def _check_cache(cls, value: Any) -> Any:
        if isinstance(value, (bool, CacheBackend)) or callable(value):
            return value
        raise ValueError("cache must be a bool, a CacheBackend instance, or a CacheBackend factory")

    @property
    def cache_enabled(self) -> bool:
        return self.cache is not False

    @classmethod
    def from_env(cls, prefix: str = "KEYVIFY_", **overrides: Any) -> "StoreConfig":
        """Build a config from environment variables.

        Reads ``{prefix}DIALECT``, ``{prefix}URI``, ``{prefix}STORAGE``,
        ``{prefix}HOST``, ``{prefix}PORT``, ``{prefix}USERNAME``,
        ``{prefix}PASSWORD``, ``{prefix}DATABASE``, ``{prefix}CACHE`` and
        ``{prefix}SERIALIZE_WRITES``. Keyword overrides win over the environment.

        Raises:
            InvalidConfigError: If the resulting config is invalid
        """
        values: dict[str, Any] = {}
        for field in ("dialect", "uri", "storage", "host", "port", "username", "password", "database"):
            env_value = os.environ.get(f"{prefix}{field.upper()}")
            if env_value:
                values[field] = env_value
        for flag in ("cache", "serialize_writes"):
            env_value = os.environ.get(f"{prefix}{flag.upper()}")
            if env_value is not None:
                values[flag] = env_value.strip().lower() not in _FALSY
        values.update(overrides)
        logger.debug(f"Loaded store config from environment ({', '.join(sorted(values)) or 'no values'})")
        return load_config(values)


def load_config(config: Union[StoreConfig, Mapping[str, Any]]) -> StoreConfig:
    """Validate ``config`` into a :class:`StoreConfig`.

    Raises:
        InvalidConfigError: If validation fails
    """
    if isinstance(config, StoreConfig):
        return config
    if not isinstance(config, Mapping):
        raise InvalidConfigError(f"Expected a StoreConfig or mapping, got {type(config).__name__}")
    try:
        return StoreConfig(**config)
    except ValidationError as e:
        raise InvalidConfigError(str(e)) from e
