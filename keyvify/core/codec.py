"""Default value codec.

Values are stored as JSON text. ``MISSING`` never reaches the backend; a
missing raw record decodes to ``MISSING``.
"""

import json
from typing import Any, Callable, Optional

from keyvify.core.exceptions import SerializationError
from keyvify.core.models import MISSING

Serializer = Callable[[Any], str]
Deserializer = Callable[[str], Any]


def serialize(value: Any) -> str:
    """Encode a structured value as JSON text.

    Args:
        value: Any JSON-compatible value

    Returns:
        JSON string

    Raises:
        SerializationError: If the value is not JSON-compatible
    """
    if value is MISSING:
        raise SerializationError("Cannot serialize a missing value")
    try:
        return json.dumps(value, ensure_ascii=False, separators=(",", ":"))
    except (TypeError, ValueError) as e:
        raise SerializationError(f"Value of type {type(value).__name__} is not serializable: {e}") from e


def deserialize(raw: str) -> Any:
    """Decode JSON text produced by :func:`serialize`.

    Raises:
        SerializationError: If the text is not valid JSON
    """
    try:
        return json.loads(raw)
    except (TypeError, ValueError) as e:
        raise SerializationError(f"Stored value is not valid JSON: {e}") from e


def decode_raw(raw: Optional[str], deserializer: Deserializer) -> Any:
    """Decode a raw record with ``deserializer``; ``None`` means no record."""
    if raw is None:
        return MISSING
    return deserializer(raw)
