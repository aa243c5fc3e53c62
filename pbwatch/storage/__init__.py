from __future__ import annotations

from .base import KeyValueStore
from .memory import MemoryKeyValueStore
from .redis_store import RedisKeyValueStore

__all__ = [
    "KeyValueStore",
    "MemoryKeyValueStore",
    "RedisKeyValueStore",
]
