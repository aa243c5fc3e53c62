"""Base key-value store interface.

This module defines the abstract base class for the small persistent store
that holds the cached access token and the last-seen score cursor.

Classes:
    KeyValueStore: Abstract base class defining the key-value interface.
"""

from __future__ import annotations

import abc


class KeyValueStore(abc.ABC):
    """Abstract base class for key-value stores.

    Values are plain strings. Expiry is enforced by the store itself; callers
    never check expiry on their own.
    """

    @abc.abstractmethod
    async def get(self, key: str) -> str | None:
        """Read a value.

        Args:
            key: The key to read.

        Returns:
            The stored string, or None if the key is missing or expired.
        """
        raise NotImplementedError

    @abc.abstractmethod
    async def put(self, key: str, value: str, ttl: int | None = None) -> None:
        """Write a value, replacing any previous one.

        Args:
            key: The key to write.
            value: The string value.
            ttl: Time-to-live in seconds. None keeps the value until it is
                overwritten or deleted.
        """
        raise NotImplementedError

    @abc.abstractmethod
    async def delete(self, key: str) -> None:
        """Delete a key. Missing keys are ignored.

        Args:
            key: The key to delete.
        """
        raise NotImplementedError

    async def close(self) -> None:
        """Release any resources held by the store."""
        return None
