"""Personal best classification.

Ranks candidate scores against the freshly fetched top-N list. Ties resolve
to the first matching position in the sorted list; ranks are for display only.
"""

from __future__ import annotations

from collections.abc import Sequence

from pbwatch.log import service_logger
from pbwatch.models import Announcement, RawScore

logger = service_logger("Ranking")


def sorted_best_values(best: Sequence[RawScore]) -> list[float]:
    """Performance values of the best list, highest first. Null values are dropped."""
    return sorted((score.pp for score in best if score.pp is not None), reverse=True)


def rank_of(value: float, best_values: Sequence[float]) -> int:
    """1-based position of `value` in `best_values`, or 0 if it is not present."""
    try:
        return best_values.index(value) + 1
    except ValueError:
        return 0


def classify(candidates: Sequence[RawScore], best: Sequence[RawScore]) -> list[Announcement]:
    """Keep the candidates that are confirmed top-N personal bests.

    A candidate qualifies when its pp is at least the lowest pp of `best` and
    the exact value appears in `best`. A value above the threshold but missing
    from `best` means the best list has not caught up with the play yet; it is
    dropped for this run.

    Args:
        candidates: New scores, in the order they should be considered.
        best: The user's current top-N scores, in any order.

    Returns:
        Announcements for the qualifying candidates, in input order.
    """
    best_values = sorted_best_values(best)
    if not best_values:
        return []
    threshold = best_values[-1]

    announcements: list[Announcement] = []
    for score in candidates:
        if score.pp is None or score.pp < threshold:
            continue
        rank = rank_of(score.pp, best_values)
        if rank == 0:
            logger.debug(f"Score {score.id} ({score.pp}pp) is above the threshold but not in the best list yet")
            continue
        announcements.append(Announcement(score=score, rank=rank))
    return announcements
