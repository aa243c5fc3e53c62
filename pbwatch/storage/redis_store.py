"""Redis-backed key-value store.

Classes:
    RedisKeyValueStore: KeyValueStore implementation over redis.asyncio.
"""

from __future__ import annotations

from .base import KeyValueStore

import redis.asyncio as redis


class RedisKeyValueStore(KeyValueStore):
    """Key-value store backed by a Redis connection.

    Attributes:
        client: The redis.asyncio client, created with decode_responses=True.
    """

    def __init__(self, client: redis.Redis) -> None:
        self.client = client

    @classmethod
    def from_url(cls, url: str) -> RedisKeyValueStore:
        return cls(redis.from_url(url, decode_responses=True, db=0))

    async def get(self, key: str) -> str | None:
        return await self.client.get(key)

    async def put(self, key: str, value: str, ttl: int | None = None) -> None:
        await self.client.set(key, value, ex=ttl if ttl and ttl > 0 else None)

    async def delete(self, key: str) -> None:
        await self.client.delete(key)

    async def close(self) -> None:
        await self.client.aclose()
