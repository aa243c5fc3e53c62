from __future__ import annotations

from .background_task import BackgroundTasks, bg_tasks
from .time import discord_timestamp, format_seconds_hms, utcnow

__all__ = [
    "BackgroundTasks",
    "bg_tasks",
    "discord_timestamp",
    "format_seconds_hms",
    "utcnow",
]
