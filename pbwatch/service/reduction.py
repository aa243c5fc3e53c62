"""Timer reduction decoration for announcements.

Appends the countdown value at fetch time and, for each configured window,
the countdown after the percentage reduction earned by the score's rank tier.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
import math

from pbwatch.config import DEFAULT_REDUCTION_TIERS, DEFAULT_REDUCTION_WINDOWS, RankTierRange
from pbwatch.helpers import format_seconds_hms
from pbwatch.models import Announcement

from .announcer import MessageDecorator


def reduction_tier(rank: int, tiers: Sequence[RankTierRange] = DEFAULT_REDUCTION_TIERS) -> int:
    """Tier index of a 1-based rank. Ranks outside every range fall into tier 0."""
    for tier_range in tiers:
        if tier_range.min <= rank <= tier_range.max:
            return tier_range.tier
    return 0


def reduced_timer_value(timer_value: int, pct: int) -> int:
    # rounds half up
    return math.floor(timer_value * (1 - pct / 100) + 0.5)


class TimerReductionDecorator(MessageDecorator):
    """Adds timer reduction lines to a message.

    Attributes:
        timer_value: The countdown value in seconds at fetch time.
        windows: Window label (e.g. week number) to reduction percentages, one
            per tier index.
        tiers: Closed rank ranges mapped to tier indexes.
    """

    def __init__(
        self,
        timer_value: int,
        windows: Mapping[int, Sequence[int]] = DEFAULT_REDUCTION_WINDOWS,
        tiers: Sequence[RankTierRange] = DEFAULT_REDUCTION_TIERS,
    ) -> None:
        self.timer_value = timer_value
        self.windows = windows
        self.tiers = tiers

    def decorate(self, content: str, announcement: Announcement) -> str:
        tier = reduction_tier(announcement.rank, self.tiers)

        content += "\n"
        content += f"- Timer at time of score fetch: {format_seconds_hms(self.timer_value)}\n"
        for window, pcts in self.windows.items():
            pct = pcts[tier]
            reduced = reduced_timer_value(self.timer_value, pct)
            content += f" - Reduction for week **{window}**: {format_seconds_hms(reduced)} ({pct}%)\n"
        return content
