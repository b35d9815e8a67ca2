"""Date helpers for compact entry listings."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional


def clock_time(date: datetime) -> str:
    """Format as H:MMam/pm with an unpadded 12-hour clock."""
    hour = date.hour % 12 or 12
    suffix = "am" if date.hour < 12 else "pm"
    return f"{hour}:{date.minute:02d}{suffix}"


def relative_date(date: datetime, now: Optional[datetime] = None) -> str:
    """Format a date relative to now.

    Today gives only the time, the last six days add the weekday, earlier
    dates this year add month/day, and anything older adds the year.
    """
    if now is None:
        now = datetime.now(date.tzinfo)
    midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)

    if date >= midnight:
        return clock_time(date)
    if date >= midnight - timedelta(days=6):
        return f"{date.strftime('%a')} {clock_time(date)}"
    if date.year == now.year:
        return f"{date.strftime('%m/%d')} {clock_time(date)}"
    return f"{date.strftime('%m/%d/%Y')} {clock_time(date)}"


def pluralize(count: int, unit: str) -> str:
    return f"{count} {unit}" if count == 1 else f"{count} {unit}s"


def humanize(seconds: float) -> str:
    """Render a duration as e.g. "1 day, 2 hours, 5 minutes".

    Zero-valued units are left out; a zero duration gives an empty string.
    """
    total = max(int(seconds), 0)
    minutes, secs = divmod(total, 60)
    hours, minutes = divmod(minutes, 60)
    days, hours = divmod(hours, 24)

    parts = []
    for count, unit in ((days, "day"), (hours, "hour"), (minutes, "minute"), (secs, "second")):
        if count > 0:
            parts.append(pluralize(count, unit))
    return ", ".join(parts)
