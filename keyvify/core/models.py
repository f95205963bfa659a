"""Core data models for keyvify."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union


class _Missing:
    """Sentinel type for "no value"."""

    _instance: "_Missing | None" = None

    def __new__(cls) -> "_Missing":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False

    def __copy__(self) -> "_Missing":
        return self

    def __deepcopy__(self, memo: dict) -> "_Missing":
        return self

    def __reduce__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()
"""No stored value. Distinct from a stored ``None`` or ``""``."""


KeyParam = Union[str, tuple[str, str]]
"""A plain key, or a ``(key, dotted_path)`` pair addressing a nested field."""


class StoreEvent(str, Enum):
    """Event kinds published by a key-value store."""

    VALUE_GET = "valueGet"
    VALUE_SET = "valueSet"
    VALUE_UPDATE = "valueUpdate"
    VALUE_DELETE = "valueDelete"
    VALUE_FETCH = "valueFetch"
    TRUNCATE = "truncate"
    CONNECT = "connect"
    DISCONNECT = "disconnect"


@dataclass
class Pair:
    """Result of a read or write.

    Attributes:
        key: The record key
        value: Current value, or ``MISSING`` when nothing is stored
        old: Previous value; ``MISSING`` unless the operation replaced one
    """

    key: str
    value: Any = MISSING
    old: Any = field(default=MISSING, repr=False)

    @property
    def has_value(self) -> bool:
        return self.value is not MISSING

    @property
    def has_old(self) -> bool:
        return self.old is not MISSING

    def to_dict(self) -> dict[str, Any]:
        """Plain dict form; ``old`` only appears when present."""
        data: dict[str, Any] = {"key": self.key, "value": None if self.value is MISSING else self.value}
        if self.has_old:
            data["old"] = self.old
        return data


@dataclass(frozen=True)
class CacheEntry:
    """A cached raw (serialized) record."""

    key: str
    value: str
