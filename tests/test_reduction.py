"""
Tests for the timer reduction decorator.
"""

from pbwatch.helpers import format_seconds_hms
from pbwatch.models import Announcement, RawScore
from pbwatch.service import TimerReductionDecorator
from pbwatch.service.reduction import reduced_timer_value, reduction_tier

from tests.fakes import make_score, ts

import pytest


def ranked(rank: int) -> Announcement:
    return Announcement(score=RawScore.model_validate(make_score(1, 300.0, ts(1))), rank=rank)


class TestReductionTier:
    """Tests for reduction_tier."""

    @pytest.mark.parametrize(
        ("rank", "tier"),
        [(1, 4), (2, 3), (5, 3), (6, 2), (25, 2), (26, 1), (50, 1), (51, 0), (100, 0), (150, 0)],
    )
    def test_closed_ranges(self, rank: int, tier: int):
        assert reduction_tier(rank) == tier


class TestFormatting:
    """Tests for time formatting and rounding."""

    @pytest.mark.parametrize(
        ("seconds", "expected"),
        [(0, "00:00:00"), (59, "00:00:59"), (3723, "01:02:03"), (180000, "50:00:00")],
    )
    def test_format_seconds_hms(self, seconds: int, expected: str):
        assert format_seconds_hms(seconds) == expected

    def test_reduced_value(self):
        assert reduced_timer_value(3600, 20) == 2880
        assert reduced_timer_value(3600, 100) == 0

    def test_rounds_half_up(self):
        assert reduced_timer_value(5, 50) == 3


class TestTimerReductionDecorator:
    """Tests for TimerReductionDecorator.decorate."""

    def test_rank_one(self):
        content = TimerReductionDecorator(36000).decorate("base", ranked(1))
        assert content == (
            "base\n"
            "- Timer at time of score fetch: 10:00:00\n"
            " - Reduction for week **3**: 00:06:00 (99%)\n"
            " - Reduction for week **4**: 00:00:00 (100%)\n"
        )

    def test_bottom_tier(self):
        content = TimerReductionDecorator(36000).decorate("base", ranked(75))
        assert " - Reduction for week **3**: 08:30:00 (15%)\n" in content
        assert " - Reduction for week **4**: 08:00:00 (20%)\n" in content

    def test_custom_windows(self):
        decorator = TimerReductionDecorator(100, windows={1: [0, 0, 0, 0, 50]})
        content = decorator.decorate("", ranked(1))
        assert content.endswith(" - Reduction for week **1**: 00:00:50 (50%)\n")
