from functools import lru_cache

from pbwatch.config import settings
from pbwatch.helpers import bg_tasks
from pbwatch.service import Announcer, CursorStore, ScorePipeline, get_novelty_strategy

from .fetcher import get_fetcher
from .store import get_store


@lru_cache
def get_announcer() -> Announcer:
    return Announcer(
        settings.discord_webhook_url,
        order=settings.announce_order,
        max_per_run=settings.max_announcements_per_run,
        interval=settings.announce_interval_seconds,
        site_url=settings.osu_api_base_url,
        timeout=settings.http_timeout_seconds,
    )


@lru_cache
def get_pipeline() -> ScorePipeline:
    return ScorePipeline(
        get_fetcher(),
        CursorStore(
            get_store(),
            key=settings.cursor_key,
            strategy=get_novelty_strategy(settings.novelty_strategy),
        ),
        get_announcer(),
        background=bg_tasks,
        reduction_windows=settings.timer_reduction_windows,
        reduction_tiers=settings.timer_reduction_tiers,
    )
