from enum import StrEnum
from typing import Annotated, Self

from pydantic import BaseModel, Field, HttpUrl, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StoreBackend(StrEnum):
    REDIS = "redis"
    MEMORY = "memory"


class AnnounceOrder(StrEnum):
    OLDEST_FIRST = "oldest_first"
    NEWEST_FIRST = "newest_first"


class NoveltyStrategyType(StrEnum):
    TIMESTAMP = "timestamp"
    HASH = "hash"


class RankTierRange(BaseModel):
    min: int
    max: int
    tier: int = Field(ge=0)


# Tier 0 is rank #100-51, tier 4 is rank #1
DEFAULT_REDUCTION_TIERS = [
    RankTierRange(min=1, max=1, tier=4),
    RankTierRange(min=2, max=5, tier=3),
    RankTierRange(min=6, max=25, tier=2),
    RankTierRange(min=26, max=50, tier=1),
    RankTierRange(min=51, max=100, tier=0),
]

DEFAULT_REDUCTION_WINDOWS = {
    3: [15, 20, 35, 90, 99],
    4: [20, 25, 40, 95, 100],
}


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="allow",
    )

    # osu
    osu_client_id: Annotated[str, Field(default=""), "osu"]
    osu_client_secret: Annotated[str, Field(default=""), "osu"]
    osu_user_id: Annotated[int, Field(default=3171691), "osu"]
    osu_mode: Annotated[str, Field(default="osu"), "osu"]
    osu_api_version: Annotated[str, Field(default="20240529"), "osu"]
    osu_api_base_url: Annotated[str, Field(default="https://osu.ppy.sh"), "osu"]
    recent_scores_limit: Annotated[int, Field(default=50, ge=1, le=100), "osu"]
    best_scores_limit: Annotated[int, Field(default=100, ge=1, le=200), "osu"]
    legacy_only: Annotated[bool, Field(default=True), "osu"]
    http_timeout_seconds: Annotated[float, Field(default=30.0), "osu"]

    # storage
    store_backend: Annotated[StoreBackend, Field(default=StoreBackend.REDIS), "storage"]
    redis_url: Annotated[str, Field(default="redis://127.0.0.1:6379"), "storage"]
    token_cache_key: Annotated[str, Field(default="osu_v2_token"), "storage"]
    cursor_key: Annotated[str, Field(default="last_seen"), "storage"]

    # announcer
    discord_webhook_url: Annotated[str, Field(default=""), "announcer"]
    announce_order: Annotated[AnnounceOrder, Field(default=AnnounceOrder.OLDEST_FIRST), "announcer"]
    max_announcements_per_run: Annotated[int, Field(default=1, ge=1), "announcer"]
    announce_interval_seconds: Annotated[float, Field(default=1.0, ge=0), "announcer"]
    novelty_strategy: Annotated[NoveltyStrategyType, Field(default=NoveltyStrategyType.TIMESTAMP), "announcer"]

    # timer
    farmathon_timer_url: Annotated[HttpUrl | None, Field(default=None), "timer"]
    timer_reduction_windows: Annotated[
        dict[int, list[int]],
        Field(default_factory=lambda: {k: list(v) for k, v in DEFAULT_REDUCTION_WINDOWS.items()}),
        "timer",
    ]
    timer_reduction_tiers: Annotated[
        list[RankTierRange],
        Field(default_factory=lambda: list(DEFAULT_REDUCTION_TIERS)),
        "timer",
    ]

    # scheduler
    poll_interval_seconds: Annotated[int, Field(default=60, ge=1), "scheduler"]

    # server
    host: Annotated[str, Field(default="0.0.0.0"), "server"]  # noqa: S104
    port: Annotated[int, Field(default=8000), "server"]
    debug: Annotated[bool, Field(default=False), "server"]

    # logging
    log_level: Annotated[str, Field(default="INFO"), "logging"]

    # monitoring
    sentry_dsn: Annotated[HttpUrl | None, Field(default=None), "monitoring"]

    @model_validator(mode="after")
    def check_reduction_table(self) -> Self:
        # ranks outside every range use tier 0
        needed = max((r.tier for r in self.timer_reduction_tiers), default=0) + 1
        for week, pcts in self.timer_reduction_windows.items():
            if len(pcts) < needed:
                raise ValueError(f"Reduction window {week} must define at least {needed} percentages, got {len(pcts)}")
        return self


settings = Settings()  # pyright: ignore[reportCallIssue]
