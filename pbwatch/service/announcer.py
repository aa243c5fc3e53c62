"""Discord webhook announcer.

Renders personal best announcements and posts them to a chat webhook. By
default only one message is sent per run, which keeps per-rank decorations
such as the timer reduction meaningful.

Classes:
    MessageDecorator: Pluggable extension point for the message body.
    Announcer: Renders and delivers announcements.
"""

from __future__ import annotations

import abc
import asyncio
from collections.abc import Sequence
import time

from pbwatch.config import AnnounceOrder
from pbwatch.helpers import discord_timestamp
from pbwatch.log import service_logger
from pbwatch.models import Announcement

from httpx import AsyncClient, HTTPError

logger = service_logger("Announcer")


class MessageDecorator(abc.ABC):
    """Appends optional presentational content to a rendered message.

    Decorators never influence which scores are announced.
    """

    @abc.abstractmethod
    def decorate(self, content: str, announcement: Announcement) -> str:
        """Return the message content with this decorator's additions."""
        raise NotImplementedError


def format_pp(pp: float | None) -> str:
    if pp is None:
        return "0"
    return f"{pp:.2f}".rstrip("0").rstrip(".")


def render_message(announcement: Announcement, site_url: str = "https://osu.ppy.sh") -> str:
    """Render the base announcement line for a ranked score."""
    score = announcement.score
    rank_label = f"#{announcement.rank}".rjust(4)

    content = f"`{rank_label}`: **{score.rank.upper()}** rank "
    content += f"**{format_pp(score.pp)}**pp "
    if score.mod_acronyms:
        content += f"+{''.join(score.mod_acronyms)} "

    map_name = f"{score.title} [{score.diff_name}]"
    if score.artist:
        map_name = f"{score.artist} - {map_name}"
    content += f"{discord_timestamp(score.ended_at)} [{map_name}]({site_url}/b/{score.resolved_beatmap_id})"
    content += f" | [__**Score link**__]({site_url}/scores/{score.id})"
    return content


class Announcer:
    """Delivers announcements to a webhook, one message per score.

    Attributes:
        webhook_url: The webhook endpoint. Delivery is skipped when empty.
        order: Which end of the chronological candidate list is announced first.
        max_per_run: Upper bound on messages sent by one `announce` call.
        interval: Minimum spacing in seconds between two deliveries.
        decorators: Decorators applied to every message.
    """

    def __init__(
        self,
        webhook_url: str,
        *,
        client: AsyncClient | None = None,
        order: AnnounceOrder = AnnounceOrder.OLDEST_FIRST,
        max_per_run: int = 1,
        interval: float = 1.0,
        decorators: Sequence[MessageDecorator] = (),
        site_url: str = "https://osu.ppy.sh",
        timeout: float = 30.0,
    ) -> None:
        self.webhook_url = webhook_url
        self.order = order
        self.max_per_run = max_per_run
        self.interval = interval
        self.decorators = list(decorators)
        self.site_url = site_url.rstrip("/")
        self._client = client
        self._owns_client = client is None
        self._timeout = timeout

    async def _get_client(self) -> AsyncClient:
        if self._client is None:
            self._client = AsyncClient(timeout=self._timeout)
        return self._client

    async def close(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    def render(self, announcement: Announcement, decorators: Sequence[MessageDecorator] = ()) -> str:
        """Render a message, skipping any decorator that fails."""
        content = render_message(announcement, self.site_url)
        for decorator in (*self.decorators, *decorators):
            try:
                content = decorator.decorate(content, announcement)
            except Exception:
                logger.exception(f"Decorator {type(decorator).__name__} failed, sending message without it")
        return content

    async def deliver(self, content: str) -> bool:
        """Post one message to the webhook.

        Args:
            content: The message text.

        Returns:
            True if the webhook accepted the message. Failures are logged and
            never retried.
        """
        if not self.webhook_url:
            logger.warning("No webhook URL configured, skipping delivery")
            return False

        client = await self._get_client()
        try:
            resp = await client.post(self.webhook_url, json={"content": content})
        except HTTPError as e:
            logger.error(f"Failed to send webhook: {type(e).__name__}: {e}")
            return False
        if not resp.is_success:
            logger.error(f"Failed to send webhook: {resp.status_code} {resp.text}")
            return False
        return True

    async def announce(
        self,
        announcements: Sequence[Announcement],
        decorators: Sequence[MessageDecorator] = (),
    ) -> list[Announcement]:
        """Render and deliver announcements.

        `announcements` is expected oldest first. Entries with rank 0 are
        skipped. Processing stops once `max_per_run` messages have been
        attempted, whether or not the webhook accepted them. When several
        messages are sent, each delivery is followed by a pause of `interval`
        minus the time the request took.

        Args:
            announcements: Ranked scores, oldest first.
            decorators: Extra decorators for this call only.

        Returns:
            The attempted announcements, with `content` and `delivered` set.
        """
        ordered = list(announcements)
        if self.order == AnnounceOrder.NEWEST_FIRST:
            ordered.reverse()

        attempted: list[Announcement] = []
        delay = 0.0
        for announcement in ordered:
            if announcement.rank == 0:
                continue
            if len(attempted) >= self.max_per_run:
                break
            if delay > 0:
                await asyncio.sleep(delay)

            content = self.render(announcement, decorators)
            started = time.monotonic()
            delivered = await self.deliver(content)
            delay = max(0.0, self.interval - (time.monotonic() - started))

            result = announcement.model_copy(update={"content": content, "delivered": delivered})
            attempted.append(result)
            if delivered:
                score = announcement.score
                logger.success(f"Announced #{announcement.rank} {format_pp(score.pp)}pp on {score.title} ({score.id})")
        return attempted
