"""Read-only loader for the plain-text activity log.

Format:

    Currently:
    	- 2024-01-15 09:30 | Fixed the @bug in parser <0123456789abcdef0123456789abcdef>
    		A note line for the entry above

Unindented lines ending in ":" start a section. Entry lines are
"- YYYY-MM-DD HH:MM | title" with an optional trailing <id>. Any other
non-blank line after an entry belongs to that entry's note.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional, Union

import portalocker

from .locking import shared_read
from .models import Entry, WorklogError, parse_entry_date

log = logging.getLogger(__name__)

ALL_SECTIONS = "All"

SECTION_PATTERN = re.compile(r"^(\S.*?):\s*$")
ENTRY_PATTERN = re.compile(
    r"^\s*- (\d{4}-\d{2}-\d{2} \d{2}:\d{2}) \| (.*?)(?:\s+<[a-f0-9]{32}>)?\s*$"
)


class LogFileError(WorklogError):
    """Raised when the log file can't be found or read."""
    pass


def parse_entries(content: str) -> list[Entry]:
    """Parse log file content into entries, in file order."""
    entries = []
    section: Optional[str] = None
    pending: Optional[tuple[datetime, str, Optional[str]]] = None
    note: list[str] = []

    def flush() -> None:
        if pending is not None:
            date, title, entry_section = pending
            entries.append(Entry(
                date=date,
                title=title,
                note=tuple(note),
                section=entry_section,
            ))

    for lineno, line in enumerate(content.splitlines(), start=1):
        match = ENTRY_PATTERN.match(line)
        if match:
            flush()
            try:
                date = parse_entry_date(match.group(1))
            except ValueError as e:
                raise LogFileError(f"Invalid date on line {lineno}: {match.group(1)}") from e
            pending = (date, match.group(2), section)
            note = []
            continue

        if line and not line[0].isspace():
            header = SECTION_PATTERN.match(line)
            if header:
                flush()
                pending = None
                note = []
                section = header.group(1)
                continue

        if pending is not None and line.strip():
            note.append(line.strip())

    flush()
    return entries


def load_entries(path: Union[str, Path], timeout: float = 5.0) -> list[Entry]:
    """Read all entries from a log file.

    Raises:
        LogFileError: If the file is missing, unreadable, or stays locked
    """
    path = Path(path).expanduser()
    if not path.exists():
        raise LogFileError(f"Log file not found: {path}")

    try:
        with shared_read(path, timeout=timeout) as f:
            content = f.read()
    except portalocker.LockException as e:
        raise LogFileError(f"Timed out waiting for lock on {path}") from e
    except (OSError, UnicodeDecodeError) as e:
        raise LogFileError(f"Cannot read log file {path}: {e}") from e

    entries = parse_entries(content)
    log.debug("Loaded %d entries from %s", len(entries), path)
    return entries


def sections(entries: Iterable[Entry]) -> list[str]:
    """Section names in order of first appearance."""
    return list(dict.fromkeys(e.section for e in entries if e.section))


def guess_section(name: str, known: Iterable[str]) -> str:
    """Match a section name loosely against known sections.

    Exact (case-insensitive) matches win, then prefix matches. Unknown names
    are returned capitalized.
    """
    if name.lower() == ALL_SECTIONS.lower():
        return ALL_SECTIONS
    known = list(known)
    for section in known:
        if section.lower() == name.lower():
            return section
    for section in known:
        if section.lower().startswith(name.lower()):
            return section
    return name[:1].upper() + name[1:]


def recent(entries: Iterable[Entry], count: int = 10, section: str = ALL_SECTIONS) -> list[Entry]:
    """Most recent entries, oldest first.

    Args:
        entries: Entries to choose from
        count: How many to keep (0 keeps all)
        section: Section name, or "All"
    """
    if section.lower() != ALL_SECTIONS.lower():
        entries = [e for e in entries if (e.section or "").lower() == section.lower()]
    ordered = sorted(entries, key=lambda e: e.date)
    if count > 0:
        ordered = ordered[-count:]
    return ordered
