from functools import lru_cache

from pbwatch.config import StoreBackend, settings
from pbwatch.storage import KeyValueStore, MemoryKeyValueStore, RedisKeyValueStore


@lru_cache
def get_store() -> KeyValueStore:
    """
    Get the key-value store selected by `store_backend`, created once per process
    """
    if settings.store_backend == StoreBackend.MEMORY:
        return MemoryKeyValueStore()
    return RedisKeyValueStore.from_url(settings.redis_url)
