"""Countdown timer fetcher.

Reads an external countdown published as a plain-text integer (elapsed
seconds). The value only decorates announcements, so every failure here is
reported as a missing value instead of an exception.

Classes:
    TimerFetcher: Fetcher for the optional countdown timer value.
"""

import random

from pbwatch.log import fetcher_logger

from ._base import BaseFetcher

from httpx import URL, HTTPError

logger = fetcher_logger("TimerFetcher")


class TimerFetcher(BaseFetcher):
    """Fetcher for the countdown timer value.

    The timer endpoint does not require OAuth authentication.

    Attributes:
        timer_url: The timer URL, or None when the feature is disabled.
    """

    def __init__(self, *args, timer_url: str | None = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.timer_url = timer_url

    async def fetch_timer_value(self) -> int | None:
        """Fetch the current timer value in seconds.

        A random `nocache` query parameter and a `Cache-Control: no-cache`
        header are sent so intermediate caches never answer.

        Returns:
            The timer value, or None if the timer is disabled, the request
            fails, or the body is not a non-negative integer.
        """
        if not self.timer_url:
            return None

        url = URL(self.timer_url).copy_set_param("nocache", str(random.random())[2:])  # noqa: S311
        client = await self._get_client()
        try:
            response = await client.get(url, headers={"Cache-Control": "no-cache"})
        except HTTPError as e:
            logger.warning(f"Failed to fetch timer value: {type(e).__name__}: {e}")
            return None

        if not response.is_success:
            logger.warning(f"Failed to fetch timer value: {response.status_code} {response.text}")
            return None

        try:
            value = int(response.text.strip())
        except ValueError:
            logger.error(f"Failed to parse timer value: {response.text!r}")
            return None
        if value < 0:
            logger.warning(f"Ignoring negative timer value: {value}")
            return None
        return value
