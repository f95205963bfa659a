"""Dot-notation access into stored object values.

A path such as ``"profile.address.city"`` addresses a nested field of a
JSON object. Only mappings are traversed; lists and scalars are leaves.
"""

import logging
from collections.abc import Mapping
from typing import Any

from keyvify.core.exceptions import InvalidKeyError, ValueNotObjectError
from keyvify.core.models import MISSING

logger = logging.getLogger(__name__)

SEPARATOR = "."


def is_object(value: Any) -> bool:
    """Return True if ``value`` can hold named fields."""
    return isinstance(value, Mapping)


def parse(path: str) -> list[str]:
    """Split a dotted path into segments.

    Args:
        path: Dotted path, e.g. ``"a.b.c"``

    Returns:
        Ordered segments, e.g. ``["a", "b", "c"]``

    Raises:
        InvalidKeyError: If the path is not a string or has an empty segment
    """
    if not isinstance(path, str):
        raise InvalidKeyError(f"Path must be a string, got {type(path).__name__}")
    segments = path.split(SEPARATOR)
    if any(not s for s in segments):
        raise InvalidKeyError(f"Path {path!r} contains an empty segment")
    return segments


def get_key(obj: Mapping, path: str) -> Any:
    """Read the value at ``path`` inside ``obj``.

    Missing nested data is not an error: returns ``MISSING`` when an
    intermediate segment is not an object or the final segment is absent.
    """
    current: Any = obj
    for segment in parse(path):
        if not is_object(current) or segment not in current:
            return MISSING
        current = current[segment]
    return current


def set_key(obj: Mapping, path: str, value: Any) -> dict:
    """Return a copy of ``obj`` with ``value`` assigned at ``path``.

    Missing intermediate segments are created as empty objects. Mappings on
    the path are copied, so ``obj`` itself is left untouched and siblings
    are carried over as-is.

    Raises:
        ValueNotObjectError: If an intermediate segment holds a non-object
    """
    segments = parse(path)
    root = dict(obj)
    current = root
    for depth, segment in enumerate(segments[:-1]):
        child = current.get(segment, MISSING)
        if child is MISSING:
            child = {}
        elif not is_object(child):
            raise ValueNotObjectError(segment=SEPARATOR.join(segments[: depth + 1]))
        else:
            child = dict(child)
        current[segment] = child
        current = child
    current[segments[-1]] = value
    return root


def delete_key(obj: Mapping, path: str) -> tuple[dict, bool]:
    """Return a copy of ``obj`` without the field at ``path``.

    Returns:
        The new object and whether a field was actually removed
    """
    segments = parse(path)
    root = dict(obj)
    current = root
    for segment in segments[:-1]:
        child = current.get(segment, MISSING)
        if not is_object(child):
            return root, False
        child = dict(child)
        current[segment] = child
        current = child
    if segments[-1] not in current:
        return root, False
    del current[segments[-1]]
    logger.debug(f"Removed nested field {path!r}")
    return root, True
