"""Word wrapping and note formatting."""

from __future__ import annotations

import re
import textwrap
from typing import Iterable

BULLET = "— "

# Leading tabs, an optional "— " marker, then any "- " markers
_LEADER_PATTERN = re.compile(r"^\t*(?:—\s+)?(?:-\s+)*")


def wrap(text: str, width: int) -> list[str]:
    """Greedy word wrap.

    A width of zero or less disables wrapping and returns the text as the only
    line. Words longer than the width get a line of their own and are never
    split.
    """
    if width <= 0:
        return [text]
    lines = textwrap.wrap(
        text,
        width=width,
        break_long_words=False,
        break_on_hyphens=False,
    )
    return lines or [text]


def normalize_note(note: Iterable[str]) -> list[str]:
    """Trim note lines, drop blank ones and give each a "— " bullet."""
    lines = []
    for line in note:
        line = line.strip()
        if not line:
            continue
        # strip() already ate tabs; the marker check still has to run
        line = _LEADER_PATTERN.sub("", line).strip()
        lines.append(f"{BULLET}{line}")
    return lines


def format_note(note: Iterable[str], wrap_width: int = 0, prefix: str = "") -> list[str]:
    """Convert raw note lines into display lines.

    Args:
        note: Raw note lines from the entry
        wrap_width: Wrap each line to this many columns (0 disables)
        prefix: Indent/marker placed before every display line

    Returns:
        Display lines, each ending in two spaces (a markdown line break)
    """
    display = []
    for line in normalize_note(note):
        for piece in wrap(line, wrap_width):
            display.append(f"{prefix}{piece.strip()}  ")
    return display


def chomp_note(note: Iterable[str]) -> str:
    """Collapse a note into a single line."""
    joined = " ".join(normalize_note(note))
    return re.sub(r"\s+", " ", joined).strip()
