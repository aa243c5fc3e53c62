"""Services of the personal best watcher, grouped by pipeline stage."""

from __future__ import annotations

from .announcer import Announcer, MessageDecorator, render_message
from .cursor import CursorStore
from .novelty import (
    HashNovelty,
    NoveltyStrategy,
    TimestampNovelty,
    find_candidates,
    get_novelty_strategy,
)
from .pipeline import RunResult, RunStatus, ScorePipeline
from .ranking import classify
from .reduction import TimerReductionDecorator

__all__ = [
    "Announcer",
    "CursorStore",
    "HashNovelty",
    "MessageDecorator",
    "NoveltyStrategy",
    "RunResult",
    "RunStatus",
    "ScorePipeline",
    "TimerReductionDecorator",
    "TimestampNovelty",
    "classify",
    "find_candidates",
    "get_novelty_strategy",
    "render_message",
]
