"""Data models for log entries and rendering options."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime, tzinfo
from typing import Optional

from .tags import find_tags


class WorklogError(Exception):
    """Base exception for worklog operations."""
    pass


DONE_PATTERN = re.compile(r"@done\((\d{4}-\d{2}-\d{2} \d{2}:\d{2})\)", re.IGNORECASE)

ENTRY_DATE_FORMAT = "%Y-%m-%d %H:%M"


def parse_entry_date(s: str) -> datetime:
    """Parse a log file timestamp (YYYY-MM-DD HH:MM)."""
    return datetime.strptime(s.strip(), ENTRY_DATE_FORMAT)


@dataclass(frozen=True)
class Entry:
    """A single logged activity."""
    date: datetime
    title: str
    note: tuple[str, ...] = ()
    section: Optional[str] = None

    @property
    def tags(self) -> list[str]:
        """Tag names found in the title, lower-cased, in order of appearance."""
        return find_tags(self.title)

    @property
    def done_date(self) -> Optional[datetime]:
        """Completion time from an @done(YYYY-MM-DD HH:MM) tag, if any."""
        match = DONE_PATTERN.search(self.title)
        if match is None:
            return None
        return parse_entry_date(match.group(1)).replace(tzinfo=self.date.tzinfo)


@dataclass(frozen=True)
class RenderOptions:
    """Formatting choices for one render call.

    Built by the configuration layer; the renderer never mutates it.
    """
    template: str = "%date | %title%note"
    date_format: str = ENTRY_DATE_FORMAT
    wrap_width: int = 0                      # 0 disables wrapping
    highlight: bool = False
    tags_color: Optional[str] = None
    times: bool = False
    totals: bool = False
    sort_tags: Optional[str] = None          # "name" or "time"
    tag_order: str = "asc"
    marker_tag: str = "flagged"
    marker_color: str = "red"
    include_notes: bool = True


@dataclass(frozen=True)
class RenderContext:
    """Environment a render runs in.

    Carries the coloring switch explicitly so the same template can be rendered
    with and without colors side by side.
    """
    coloring: bool = True
    columns: Optional[int] = None            # None queries the terminal
    now: Optional[datetime] = field(default=None, compare=False)

    def reference_time(self, tz: Optional[tzinfo] = None) -> datetime:
        """Current time in tz, so it compares with entry dates in that zone.

        A fixed naive now is taken to be in tz; a fixed aware now is converted.
        """
        if self.now is None:
            return datetime.now(tz)
        if self.now.tzinfo is None:
            return self.now.replace(tzinfo=tz)
        if tz is None:
            return self.now.replace(tzinfo=None)
        return self.now.astimezone(tz)
