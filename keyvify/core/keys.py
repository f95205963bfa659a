"""Key and key-parameter validation.

All checks here run before any backend I/O.
"""

import re
from typing import Any, Optional

from keyvify.core.exceptions import (
    InvalidKeyError,
    InvalidParametersError,
    InvalidStoreNameError,
    NoKeyError,
    NoStoreNameError,
)
from keyvify.core.paths import parse

# No whitespace, control characters or "$" (reserved by document stores)
_VALID_LITERAL = re.compile(r"[^\s$\x00-\x1f\x7f]+")
_VALID_IDENTIFIER = re.compile(r"[A-Za-z_][A-Za-z0-9_]{0,62}")

# Longest key every backend stores in its key column
MAX_KEY_LENGTH = 255


def is_valid_literal(value: Any) -> bool:
    """Return True if ``value`` is usable as a record key."""
    return isinstance(value, str) and bool(_VALID_LITERAL.fullmatch(value))


def validate_key(key: Any) -> str:
    """Check a plain key.

    Raises:
        NoKeyError: If the key is empty or None
        InvalidKeyError: If the key is not a string, is longer than
            :data:`MAX_KEY_LENGTH` or is not a valid literal
    """
    if key is None or key == "":
        raise NoKeyError()
    if not isinstance(key, str):
        raise InvalidKeyError(f"Key must be a string, got {type(key).__name__}")
    if len(key) > MAX_KEY_LENGTH:
        raise InvalidKeyError(f"Key is {len(key)} characters long; the limit is {MAX_KEY_LENGTH}")
    if not is_valid_literal(key):
        raise InvalidKeyError(f"Key {key!r} contains invalid characters")
    return key


def resolve_key_param(kpar: Any) -> tuple[str, Optional[str]]:
    """Split a key parameter into ``(key, path)``.

    Args:
        kpar: A key string or a ``(key, path)`` pair

    Returns:
        The validated key and the dotted path, or None when no path is given

    Raises:
        InvalidParametersError: If ``kpar`` is neither shape
        NoKeyError: If the key is empty
        InvalidKeyError: If the key or path is malformed
    """
    if isinstance(kpar, str):
        return validate_key(kpar), None

    if isinstance(kpar, (tuple, list)) and len(kpar) == 2:
        key, path = kpar
        if not isinstance(path, str) or (key is not None and not isinstance(key, str)):
            raise InvalidParametersError()
        key = validate_key(key)
        if not path:
            return key, None
        parse(path)
        return key, path

    raise InvalidParametersError()


def validate_store_name(name: Any) -> str:
    """Check a store name, which becomes a table or collection name.

    Raises:
        NoStoreNameError: If the name is empty
        InvalidStoreNameError: If the name is not a plain identifier
    """
    if name is None or name == "":
        raise NoStoreNameError()
    if not isinstance(name, str) or not _VALID_IDENTIFIER.fullmatch(name):
        raise InvalidStoreNameError(name)
    return name
