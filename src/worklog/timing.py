"""Elapsed time per entry and per-tag totals."""

from __future__ import annotations

from collections import defaultdict
from datetime import timedelta
from typing import Iterable, Optional

from .dates import humanize
from .models import Entry

# Tags that mark state rather than categorize time
IGNORED_TAGS = {"done"}


def entry_interval(entry: Entry) -> Optional[timedelta]:
    """Time between an entry's start and its @done date."""
    done = entry.done_date
    if done is None:
        return None
    interval = done - entry.date
    if interval <= timedelta(0):
        return None
    return interval


def format_interval(entry: Entry) -> str:
    """Humanized interval for an entry, or an empty string."""
    interval = entry_interval(entry)
    if interval is None:
        return ""
    return humanize(interval.total_seconds())


def format_duration(spent: timedelta) -> str:
    """Format as DD:HH:MM."""
    minutes = int(spent.total_seconds()) // 60
    hours, minutes = divmod(minutes, 60)
    days, hours = divmod(hours, 24)
    return f"{days:02d}:{hours:02d}:{minutes:02d}"


def tag_totals(entries: Iterable[Entry]) -> dict[str, timedelta]:
    """Sum entry intervals for every tag the entry carries."""
    totals: dict[str, timedelta] = defaultdict(timedelta)
    for entry in entries:
        interval = entry_interval(entry)
        if interval is None:
            continue
        for tag in dict.fromkeys(entry.tags):
            if tag not in IGNORED_TAGS:
                totals[tag] += interval
    return dict(totals)


def summarize(entries: Iterable[Entry], sort_by_name: bool = True, sort_order: str = "asc") -> str:
    """Build the tag totals block appended after a batch of entries.

    Args:
        entries: Entries that were rendered
        sort_by_name: Sort tags alphabetically instead of by time spent
        sort_order: "asc" or "desc"

    Returns:
        The summary text, or an empty string when no time was tracked
    """
    entries = list(entries)
    totals = tag_totals(entries)
    if not totals:
        return ""

    if sort_by_name:
        items = sorted(totals.items())
    else:
        items = sorted(totals.items(), key=lambda item: (item[1], item[0]))
    if sort_order == "desc":
        items.reverse()

    tracked = sum((entry_interval(e) or timedelta(0) for e in entries), timedelta(0))
    width = max(len(tag) for tag in totals) + 1

    lines = ["", "--- Tag Totals ---"]
    for tag, spent in items:
        lines.append(f"{tag + ':':<{width}} {format_duration(spent)}")
    lines.extend(["", f"Total tracked: {format_duration(tracked)}", ""])
    return "\n".join(lines)
