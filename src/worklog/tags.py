"""@tag detection and coloring."""

from __future__ import annotations

import re

from . import colors

# @name or @name(value) at a word boundary
TAG_PATTERN = re.compile(r"(?:^|(?<=\s))@([\w-]+(?:\.[\w-]+)*)(?:\(([^)]*)\))?")

# Either an escape sequence or a tag candidate; tags stop at whitespace,
# "(" and the start of the next escape
_TOKEN_PATTERN = re.compile(r"(?P<escape>\x1b\[[0-9;]*m)|(?P<tag>@[^\s(\x1b]+)")


def find_tags(text: str) -> list[str]:
    """List tag names in text, lower-cased, in order of appearance."""
    return [m.group(1).lower() for m in TAG_PATTERN.finditer(colors.strip(text))]


def recolor_tags(text: str, tag_color: str, default_color: str) -> str:
    """Color every @tag in already rendered text.

    Each tag is closed with the escape sequence that was last seen before it,
    so a tag inside a colored span returns to that span's color. Tags with no
    earlier escape close with default_color.
    """
    parts = []
    last = 0
    last_color = default_color
    escape_end = -1

    for match in _TOKEN_PATTERN.finditer(text):
        if match.group("escape"):
            last_color = match.group("escape")
            escape_end = match.end()
            continue

        start = match.start()
        if start > 0 and not text[start - 1].isspace() and start != escape_end:
            continue

        parts.append(text[last:start])
        parts.append(f"{tag_color}{match.group('tag')}{last_color}")
        last = match.end()

    parts.append(text[last:])
    return "".join(parts)
