"""Poll, diff, rank and announce pipeline.

One `ScorePipeline.run()` call is one scheduled invocation:

1. get a bearer token from the token cache;
2. fetch recent and best scores (and the optional timer) concurrently;
3. find the recent scores newer than the cursor;
4. move the cursor to the newest recent score;
5. keep the candidates that are confirmed personal bests;
6. hand the announcements to a background task and return.

The cursor is written before delivery starts, so a crash while announcing
never leads to the same score being announced twice.
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from enum import StrEnum

from pbwatch.config import DEFAULT_REDUCTION_TIERS, DEFAULT_REDUCTION_WINDOWS, RankTierRange
from pbwatch.fetcher import Fetcher, ScoreFetchError, TokenAuthError
from pbwatch.helpers import BackgroundTasks
from pbwatch.log import service_logger
from pbwatch.models import Announcement, RawScore

from .announcer import Announcer, MessageDecorator
from .cursor import CursorStore
from .ranking import classify
from .reduction import TimerReductionDecorator

logger = service_logger("Pipeline")


class RunStatus(StrEnum):
    AUTH_FAILED = "auth_failed"
    FETCH_FAILED = "fetch_failed"
    COMPLETED = "completed"


@dataclass
class RunResult:
    status: RunStatus
    candidates: list[RawScore] = field(default_factory=list)
    announcements: list[Announcement] = field(default_factory=list)
    cursor_updated: bool = False
    timer_value: int | None = None
    announce_task: asyncio.Task[list[Announcement]] | None = None

    async def wait_announced(self) -> list[Announcement]:
        """Wait for the background delivery and return what was attempted."""
        if self.announce_task is None:
            return []
        return await self.announce_task


class ScorePipeline:
    """Runs one poll of the personal best watcher.

    Attributes:
        fetcher: The osu! API fetcher, also the token cache owner.
        cursor_store: Persistence for the last seen score.
        announcer: Delivers announcements.
        background: Task handle the announcement phase is registered on.
    """

    def __init__(
        self,
        fetcher: Fetcher,
        cursor_store: CursorStore,
        announcer: Announcer,
        *,
        background: BackgroundTasks | None = None,
        reduction_windows: Mapping[int, Sequence[int]] = DEFAULT_REDUCTION_WINDOWS,
        reduction_tiers: Sequence[RankTierRange] = DEFAULT_REDUCTION_TIERS,
    ) -> None:
        self.fetcher = fetcher
        self.cursor_store = cursor_store
        self.announcer = announcer
        self.background = background or BackgroundTasks()
        self.reduction_windows = reduction_windows
        self.reduction_tiers = reduction_tiers

    def _decorators_for(self, timer_value: int | None) -> list[MessageDecorator]:
        if timer_value is None:
            return []
        return [TimerReductionDecorator(timer_value, self.reduction_windows, self.reduction_tiers)]

    async def run(self) -> RunResult:
        """Execute one poll.

        Returns:
            The run result. Auth and fetch failures are reported through
            `status` and leave the cursor untouched.
        """
        token = await self.fetcher.get_token()
        if token is None:
            return RunResult(RunStatus.AUTH_FAILED)

        cursor = await self.cursor_store.load()
        if cursor is not None:
            logger.info(f"Last seen score: {cursor.created_at} {cursor.title}")
        else:
            logger.info("No last seen score, catching up over the fetched window")

        fetched, timer_value = await asyncio.gather(
            self.fetcher.fetch_recent_and_best(token),
            self.fetcher.fetch_timer_value(),
            return_exceptions=True,
        )
        if isinstance(timer_value, BaseException):
            logger.warning(f"Timer value unavailable: {timer_value}")
            timer_value = None
        if isinstance(fetched, TokenAuthError):
            logger.error(f"Authorization failed while fetching scores: {fetched}")
            return RunResult(RunStatus.AUTH_FAILED)
        if isinstance(fetched, ScoreFetchError):
            logger.error(str(fetched))
            return RunResult(RunStatus.FETCH_FAILED)
        if isinstance(fetched, BaseException):
            raise fetched
        recent, best = fetched

        candidates = self.cursor_store.strategy.find_candidates(recent, cursor)
        cursor_updated = await self.cursor_store.update_cursor(recent, cursor)
        announcements = classify(candidates, best)
        logger.info(
            f"Fetched {len(recent)} recent and {len(best)} best scores, "
            f"{len(candidates)} new, {len(announcements)} personal bests"
        )

        result = RunResult(
            RunStatus.COMPLETED,
            candidates=candidates,
            announcements=announcements,
            cursor_updated=cursor_updated,
            timer_value=timer_value,
        )
        if announcements:
            result.announce_task = self.background.add_task(
                self.announcer.announce(announcements, self._decorators_for(timer_value)),
                name="announce",
            )
        return result
