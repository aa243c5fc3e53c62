"""Novelty detection for recent scores.

Decides which entries of the recent-scores list were set after the last seen
score. Two identity strategies are available: the completion timestamp
(default) and a content hash of the reduced score record.

The filter only answers "happened after the last checkpoint"; whether a play
is a personal best is decided later by the rank classifier.
"""

from __future__ import annotations

import abc
from collections.abc import Sequence
from datetime import datetime
import hashlib
import json

from pbwatch.config import NoveltyStrategyType
from pbwatch.models import RawScore, ScoreCursor


class NoveltyStrategy(abc.ABC):
    """Identity rule used to locate the cursor inside the recent-scores list."""

    @abc.abstractmethod
    def score_identity(self, score: RawScore) -> object:
        """Return the identity of a fetched score."""
        raise NotImplementedError

    @abc.abstractmethod
    def cursor_identity(self, cursor: ScoreCursor | None) -> object | None:
        """Return the identity stored in a cursor, or None if it has none."""
        raise NotImplementedError

    def make_cursor(self, score: RawScore) -> ScoreCursor:
        """Reduce a score to the record persisted as cursor."""
        return ScoreCursor.from_score(score)

    def is_cursor(self, score: RawScore, cursor: ScoreCursor | None) -> bool:
        identity = self.cursor_identity(cursor)
        return identity is not None and identity == self.score_identity(score)

    def find_candidates(self, recent: Sequence[RawScore], cursor: ScoreCursor | None) -> list[RawScore]:
        """Return the recent scores set strictly after the cursor, oldest first.

        `recent` is ordered newest first. If the cursor is at position 0 nothing
        is new. If it is at position k, positions k-1 .. 0 are new. If it is not
        found at all (empty cursor, or it scrolled out of the fetched window)
        the whole list is treated as new.

        Args:
            recent: Recent scores, newest first.
            cursor: The persisted last seen score, if any.

        Returns:
            The candidate scores in chronological order.
        """
        last_seen_index = next((i for i, score in enumerate(recent) if self.is_cursor(score, cursor)), -1)
        if last_seen_index == 0:
            return []
        newer = recent if last_seen_index == -1 else recent[:last_seen_index]
        return list(reversed(newer))


class TimestampNovelty(NoveltyStrategy):
    """Identify scores by completion timestamp.

    Cursors written by older deployments may carry nothing but the timestamp,
    so this is the default.
    """

    def score_identity(self, score: RawScore) -> datetime:
        return score.ended_at

    def cursor_identity(self, cursor: ScoreCursor | None) -> datetime | None:
        return cursor.created_at if cursor is not None else None


def score_digest(cursor: ScoreCursor) -> str:
    """SHA-256 of the canonical JSON form of a reduced score record."""
    canonical = json.dumps(
        cursor.model_dump(mode="json", exclude={"digest"}),
        sort_keys=True,
        separators=(",", ":"),
    )
    return hashlib.sha256(canonical.encode()).hexdigest()


class HashNovelty(NoveltyStrategy):
    """Identify scores by a content hash of their reduced record.

    Survives renames of the timestamp field, but any change to a hashed field
    between fetches (e.g. a pp recalculation) makes the cursor unmatchable,
    which triggers the catch-up policy.
    """

    def score_identity(self, score: RawScore) -> str:
        return score_digest(ScoreCursor.from_score(score))

    def cursor_identity(self, cursor: ScoreCursor | None) -> str | None:
        if cursor is None:
            return None
        if cursor.digest is not None:
            return cursor.digest
        return score_digest(cursor)

    def make_cursor(self, score: RawScore) -> ScoreCursor:
        cursor = ScoreCursor.from_score(score)
        cursor.digest = score_digest(cursor)
        return cursor


def get_novelty_strategy(kind: NoveltyStrategyType) -> NoveltyStrategy:
    if kind == NoveltyStrategyType.HASH:
        return HashNovelty()
    return TimestampNovelty()


def find_candidates(
    recent: Sequence[RawScore],
    cursor: ScoreCursor | None,
    strategy: NoveltyStrategy | None = None,
) -> list[RawScore]:
    """Module-level shortcut for `NoveltyStrategy.find_candidates`.

    Uses timestamp identity unless another strategy is given.
    """
    return (strategy or TimestampNovelty()).find_candidates(recent, cursor)
