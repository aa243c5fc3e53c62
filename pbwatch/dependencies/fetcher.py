from functools import lru_cache

from pbwatch.config import settings
from pbwatch.fetcher import Fetcher

from .store import get_store


@lru_cache
def get_fetcher() -> Fetcher:
    return Fetcher(
        settings.osu_client_id,
        settings.osu_client_secret,
        get_store(),
        token_key=settings.token_cache_key,
        base_url=settings.osu_api_base_url,
        api_version=settings.osu_api_version,
        timeout=settings.http_timeout_seconds,
        user_id=settings.osu_user_id,
        mode=settings.osu_mode,
        recent_limit=settings.recent_scores_limit,
        best_limit=settings.best_scores_limit,
        legacy_only=settings.legacy_only,
        timer_url=str(settings.farmathon_timer_url) if settings.farmathon_timer_url else None,
    )
