"""In-process key-value store.

Classes:
    MemoryKeyValueStore: Dict-backed KeyValueStore with TTL support.
"""

from __future__ import annotations

from collections.abc import Callable
import time

from .base import KeyValueStore


class MemoryKeyValueStore(KeyValueStore):
    """Key-value store kept in a dictionary.

    Expired entries are dropped lazily on read. State is lost when the process
    exits, so this backend is meant for development and tests.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._data: dict[str, tuple[str, float | None]] = {}

    async def get(self, key: str) -> str | None:
        entry = self._data.get(key)
        if entry is None:
            return None
        value, expire_at = entry
        if expire_at is not None and expire_at <= self._clock():
            del self._data[key]
            return None
        return value

    async def put(self, key: str, value: str, ttl: int | None = None) -> None:
        expire_at = self._clock() + ttl if ttl and ttl > 0 else None
        self._data[key] = (value, expire_at)

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)
