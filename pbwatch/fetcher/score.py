"""User score fetcher for osu! API.

This module provides a fetcher class for retrieving a user's recent plays and
personal best plays from the osu! API v2.

Classes:
    ScoreFetchError: Exception raised when a score list cannot be fetched.
    ScoreFetcher: Fetcher for the recent and best score lists of one user.
"""

import asyncio

from pbwatch.log import fetcher_logger
from pbwatch.models import RawScore

from ._base import BaseFetcher

from httpx import HTTPError, HTTPStatusError
from pydantic import TypeAdapter, ValidationError

logger = fetcher_logger("ScoreFetcher")
adapter = TypeAdapter(list[RawScore])


class ScoreFetchError(Exception):
    """Exception raised when a mandatory score list cannot be fetched.

    Attributes:
        kind: Which list failed, "recent" or "best".
        status_code: The HTTP status code, if the API answered at all.
    """

    def __init__(self, kind: str, message: str, status_code: int | None = None):
        super().__init__(f"Failed to fetch {kind} scores: {message}")
        self.kind = kind
        self.status_code = status_code


class ScoreFetcher(BaseFetcher):
    """Fetcher for the recent and best scores of a single user.

    Inherits from BaseFetcher to utilize the token cache and request handling.

    Attributes:
        user_id: The osu! user whose scores are fetched.
        mode: The ruleset name, e.g. "osu".
        recent_limit: How many recent plays to request.
        best_limit: How many personal bests to request (the N of top-N).
        legacy_only: Whether to request only scores set on the legacy client.
    """

    def __init__(
        self,
        *args,
        user_id: int = 0,
        mode: str = "osu",
        recent_limit: int = 50,
        best_limit: int = 100,
        legacy_only: bool = True,
        **kwargs,
    ):
        super().__init__(*args, **kwargs)
        self.user_id = user_id
        self.mode = mode
        self.recent_limit = recent_limit
        self.best_limit = best_limit
        self.legacy_only = legacy_only

    def _scores_url(self, kind: str) -> str:
        return f"{self.base_url}/api/v2/users/{self.user_id}/scores/{kind}"

    async def _get_scores(self, kind: str, token: str, limit: int) -> list[RawScore]:
        params = {
            "legacy_only": int(self.legacy_only),
            "mode": self.mode,
            "limit": limit,
        }
        logger.opt(colors=True).debug(f"get_scores: <y>{kind}</y> {params}")
        try:
            data = await self.request_api(self._scores_url(kind), token, params=params)
        except HTTPStatusError as e:
            raise ScoreFetchError(kind, f"HTTP {e.response.status_code}", e.response.status_code) from e
        except HTTPError as e:
            raise ScoreFetchError(kind, f"{type(e).__name__}: {e}") from e
        except ValueError as e:
            # 2xx with a non-JSON body, e.g. a maintenance page
            raise ScoreFetchError(kind, "invalid JSON body") from e

        try:
            return adapter.validate_python(data)
        except ValidationError as e:
            raise ScoreFetchError(kind, f"unexpected response shape ({e.error_count()} errors)") from e

    async def get_recent_scores(self, token: str) -> list[RawScore]:
        """Fetch the user's recent plays, newest first.

        Args:
            token: The bearer token.

        Returns:
            Recent scores ordered as returned by the API (position 0 is the
            most recent play).

        Raises:
            ScoreFetchError: If the request fails or the payload is invalid.
        """
        return await self._get_scores("recent", token, self.recent_limit)

    async def get_best_scores(self, token: str) -> list[RawScore]:
        """Fetch the user's top-N personal bests.

        No ordering is assumed by callers.

        Args:
            token: The bearer token.

        Returns:
            The personal best scores.

        Raises:
            ScoreFetchError: If the request fails or the payload is invalid.
        """
        return await self._get_scores("best", token, self.best_limit)

    async def fetch_recent_and_best(self, token: str) -> tuple[list[RawScore], list[RawScore]]:
        """Fetch the recent and best score lists concurrently.

        Both requests always run to completion before a failure is reported.

        Args:
            token: The bearer token.

        Returns:
            A tuple of (recent scores, best scores).

        Raises:
            TokenAuthError: If the token could not be renewed after a 401.
            ScoreFetchError: If either list could not be fetched.
        """
        recent, best = await asyncio.gather(
            self.get_recent_scores(token),
            self.get_best_scores(token),
            return_exceptions=True,
        )
        for result in (recent, best):
            if isinstance(result, BaseException):
                raise result
        return recent, best  # pyright: ignore[reportReturnType]
