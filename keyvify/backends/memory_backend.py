"""In-process backend holding records in a dict.

Useful for tests and throwaway stores; nothing survives the process.
"""

from typing import Optional

from keyvify.backends.base import BackendAdapter


class MemoryBackend(BackendAdapter):
    """Dict-backed storage backend."""

    kind = "memory"

    def __init__(self, name: str) -> None:
        super().__init__(name)
        self._records: dict[str, str] = {}

    async def point_get(self, key: str) -> Optional[str]:
        return self._records.get(key)

    async def upsert(self, key: str, value: str) -> None:
        self._records[key] = value

    async def point_delete(self, key: str) -> int:
        return 1 if self._records.pop(key, None) is not None else 0

    async def scan_all(self) -> list[tuple[str, str]]:
        return list(self._records.items())

    async def truncate_all(self) -> int:
        removed = len(self._records)
        self._records.clear()
        return removed
