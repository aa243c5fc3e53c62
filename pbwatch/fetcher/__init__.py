"""Fetchers for osu! data.

This module contains classes that fetch data from the osu! API and the optional
countdown timer. The Fetcher class combines all of these fetchers for easy access.

Fetcher needs osu! v2 API credentials to function, which can be set in the config
file or as environment variables.

- References:
    - osu! API documentation: https://osu.ppy.sh/docs/index.html
"""

from ._base import BaseFetcher, TokenAuthError
from .score import ScoreFetcher, ScoreFetchError
from .timer import TimerFetcher


class Fetcher(ScoreFetcher, TimerFetcher):
    """A class that combines all fetchers for easy access."""

    pass


__all__ = [
    "BaseFetcher",
    "Fetcher",
    "ScoreFetchError",
    "ScoreFetcher",
    "TimerFetcher",
    "TokenAuthError",
]
