"""Date and time utilities."""

from datetime import UTC, datetime


def utcnow() -> datetime:
    """Get the current UTC datetime.

    Returns:
        The current datetime with UTC timezone.
    """
    return datetime.now(tz=UTC)


def format_seconds_hms(seconds: int | float) -> str:
    """Format a number of seconds as HH:MM:SS.

    Hours are not wrapped at 24, so large values render as e.g. "50:00:00".
    """
    seconds = int(seconds)
    hours, remainder = divmod(seconds, 3600)
    minutes, secs = divmod(remainder, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


def discord_timestamp(dt: datetime, style: str = "f") -> str:
    """Render a datetime as a Discord timestamp tag, e.g. `<t:1700000000:f>`.

    Naive datetimes are treated as UTC.
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return f"<t:{int(dt.timestamp())}:{style}>"
