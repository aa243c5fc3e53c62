"""Persistence of the last seen score.

Classes:
    CursorStore: Loads and updates the cursor in the key-value store.
"""

from __future__ import annotations

from collections.abc import Sequence

from pbwatch.log import service_logger
from pbwatch.models import RawScore, ScoreCursor
from pbwatch.storage import KeyValueStore

from .novelty import NoveltyStrategy, TimestampNovelty

from pydantic import ValidationError

logger = service_logger("Cursor")


class CursorStore:
    """Reads and writes the last seen score under a single key.

    Attributes:
        store: The backing key-value store.
        key: The key holding the JSON cursor record.
        strategy: The identity rule deciding whether the cursor is current.
    """

    def __init__(
        self,
        store: KeyValueStore,
        key: str = "last_seen",
        strategy: NoveltyStrategy | None = None,
    ) -> None:
        self.store = store
        self.key = key
        self.strategy = strategy or TimestampNovelty()

    async def load(self) -> ScoreCursor | None:
        """Load the persisted cursor.

        Returns:
            The cursor, or None if it is missing or cannot be parsed. A corrupt
            cursor is logged and treated as empty.
        """
        raw = await self.store.get(self.key)
        if raw is None:
            return None
        try:
            return ScoreCursor.model_validate_json(raw)
        except ValidationError as e:
            logger.warning(f"Failed to parse last seen score: {e.error_count()} errors, resetting to empty")
            return None

    async def update_cursor(self, recent: Sequence[RawScore], current: ScoreCursor | None = None) -> bool:
        """Point the cursor at the newest recent score.

        Writes only when `recent` is non-empty and its newest entry differs
        from the persisted cursor.

        Args:
            recent: Recent scores, newest first.
            current: The cursor loaded earlier in the run. Loaded from the
                store when omitted.

        Returns:
            True if the cursor was rewritten.
        """
        if not recent:
            return False
        if current is None:
            current = await self.load()

        latest = recent[0]
        if self.strategy.is_cursor(latest, current):
            return False

        logger.info(f"Updating last seen score to {latest.title}, created_at={latest.ended_at.isoformat()}")
        await self.store.put(self.key, self.strategy.make_cursor(latest).model_dump_json())
        return True
