"""Parser for the note directive family.

Recognized forms, all ending in the literal ``note``:

    %note        note lines indented by one tab
    %idnote      two tabs
    %odnote      no indent
    %chompnote   the whole note collapsed onto one line
    %[^M][C]N[P[S]]note
                 custom: optional marker ``^M``, optional indent of N copies
                 of C (``t`` for tabs, anything else non-alphanumeric for
                 spaces; spaces when C is left out), optional prefix
                 character P with an optional spacer S (``_`` or space for a
                 space, ``t`` for a tab)
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional


class NoteStyle(Enum):
    """Layout requested by a note directive."""
    PLAIN = "note"
    INDENTED = "idnote"
    OUTDENTED = "odnote"
    CHOMPED = "chompnote"
    CUSTOM = "custom"


NAMED_STYLES = {
    "": NoteStyle.PLAIN,
    "id": NoteStyle.INDENTED,
    "od": NoteStyle.OUTDENTED,
    "chomp": NoteStyle.CHOMPED,
}

KEYWORD = "note"

# Longest modifier run between "%" and "note": ^M + C + three digits + P + S
MAX_MODIFIER_LENGTH = 8

SPACERS = {" ": " ", "_": " ", "t": "\t"}


@dataclass(frozen=True)
class NoteDirective:
    """One parsed note placeholder and its span in the template."""
    style: NoteStyle
    start: int
    end: int
    marker: str = ""
    indent_char: str = ""
    indent_count: int = 0
    prefix: str = ""

    @property
    def text(self) -> str:
        return f"{self.marker}{self.indent_char * self.indent_count}{self.prefix}"

    @property
    def line_prefix(self) -> str:
        """What goes in front of every note line."""
        if self.style is NoteStyle.PLAIN:
            return "\t"
        if self.style is NoteStyle.INDENTED:
            return "\t\t"
        if self.style is NoteStyle.CUSTOM:
            return self.text
        return ""


def _is_indent_char(c: str) -> bool:
    return c == "t" or not (c.isascii() and c.isalnum())


def _leading_digits(s: str) -> str:
    end = 0
    while end < len(s) and s[end].isdigit() and s[end].isascii():
        end += 1
    return s[:end]


def _indent_options(rest: str) -> list[tuple[str, int, int]]:
    """Candidate (char, count, consumed) readings of an indent modifier."""
    options = []
    if rest and _is_indent_char(rest[0]):
        digits = _leading_digits(rest[1:])
        if digits:
            char = "\t" if rest[0] == "t" else " "
            options.append((char, int(digits), 1 + len(digits)))
    digits = _leading_digits(rest)
    if digits:
        options.append((" ", int(digits), len(digits)))
    options.append(("", 0, 0))
    return options


def _parse_prefix(tail: str) -> Optional[str]:
    if len(tail) <= 1:
        return tail
    if len(tail) == 2 and tail[1] in SPACERS:
        return tail[0] + SPACERS[tail[1]]
    return None


def parse_modifiers(body: str) -> Optional[tuple[str, str, int, str]]:
    """Parse the text between "%" and "note" of a custom note directive.

    Returns:
        (marker, indent_char, indent_count, prefix), or None if body is not
        valid modifier syntax
    """
    markers = [("", body)]
    if body.startswith("^") and len(body) >= 2:
        markers.insert(0, (body[1], body[2:]))

    for marker, rest in markers:
        for char, count, consumed in _indent_options(rest):
            prefix = _parse_prefix(rest[consumed:])
            if prefix is not None:
                return marker, char, count, prefix
    return None


def _directive_at(template: str, start: int) -> Optional[NoteDirective]:
    """Try to read a note directive whose "%" sits at start."""
    limit = min(len(template), start + 1 + MAX_MODIFIER_LENGTH)
    for pos in range(start + 1, limit + 1):
        if not template.startswith(KEYWORD, pos):
            continue
        body = template[start + 1:pos]
        end = pos + len(KEYWORD)
        if body in NAMED_STYLES:
            return NoteDirective(NAMED_STYLES[body], start, end)
        parsed = parse_modifiers(body)
        if parsed is not None:
            marker, char, count, prefix = parsed
            return NoteDirective(NoteStyle.CUSTOM, start, end, marker, char, count, prefix)
    return None


def find_note_directives(template: str) -> list[NoteDirective]:
    """Find every note directive in a template, left to right."""
    found = []
    pos = template.find("%")
    while pos != -1:
        directive = _directive_at(template, pos)
        if directive is not None:
            found.append(directive)
            pos = template.find("%", directive.end)
        else:
            pos = template.find("%", pos + 1)
    return found


def substitute_notes(template: str, replacement: Callable[[NoteDirective], str]) -> str:
    """Replace every note directive with replacement(directive)."""
    parts = []
    last = 0
    for directive in find_note_directives(template):
        parts.append(template[last:directive.start])
        parts.append(replacement(directive))
        last = directive.end
    parts.append(template[last:])
    return "".join(parts)
