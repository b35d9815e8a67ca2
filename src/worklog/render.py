"""Template renderer - turns entries into text through %directive templates.

A render is a fixed sequence of substitution passes. Each pass takes the
previous pass's output and returns a new string; later passes see what
earlier ones inserted, so the order below is part of the template contract:

    1. %colorname and {Xy} color shorthand
    2. %date
    3. %interval
    4. %shortdate
    5. %title
    6. %section
    7. @tag recoloring (when a tag color is configured)
    8. note directives
    9. %hr and %hr_under
   10. %n and %t

Unknown directives are left in the output untouched and no pass raises on a
missing or malformed directive.
"""

from __future__ import annotations

import logging
import re
import shutil
from typing import Iterable, Optional

from . import colors
from .dates import relative_date
from .directives import NoteDirective, NoteStyle, substitute_notes
from .models import Entry, RenderContext, RenderOptions
from .tags import recolor_tags
from .text import chomp_note, format_note, normalize_note, wrap
from .timing import format_interval, summarize

log = logging.getLogger(__name__)

FALLBACK_COLUMNS = 80

COLOR_PATTERN = re.compile(r"%([a-z]+(?:_[a-z]+)*)")
HR_PATTERN = re.compile(r"%hr(_under)?")

TITLE_CONTINUATION = "\n\t "


def terminal_columns(override: Optional[int] = None) -> int:
    """Width of the terminal, or a fixed fallback when it can't be queried."""
    if override is not None and override > 0:
        return override
    try:
        columns = shutil.get_terminal_size(fallback=(FALLBACK_COLUMNS, 24)).columns
    except (OSError, ValueError) as e:
        log.debug("Terminal width unavailable (%s), using %d", e, FALLBACK_COLUMNS)
        return FALLBACK_COLUMNS
    return columns if columns > 0 else FALLBACK_COLUMNS


class TemplateRenderer:
    """Render entries through one set of options in one context."""

    def __init__(self, options: RenderOptions, context: Optional[RenderContext] = None):
        self.options = options
        self.context = context or RenderContext()

    def color(self, name: str) -> str:
        return colors.resolve(name, self.context.coloring)

    # ========== Batch ==========

    def render(self, entries: Iterable[Entry]) -> str:
        """Render a batch of entries, each followed by a newline.

        When totals are requested the tag time summary is appended once.
        """
        entries = list(entries)
        output = "".join(f"{self.render_entry(entry)}\n" for entry in entries)

        if self.options.totals:
            output += summarize(
                entries,
                sort_by_name=self.options.sort_tags != "time",
                sort_order=self.options.tag_order,
            )

        log.debug("Rendered %d entries", len(entries))
        return output

    def render_entry(self, entry: Entry) -> str:
        """Render one entry through the template."""
        output = self.options.template
        output = self.substitute_colors(output)
        output = output.replace("%date", entry.date.strftime(self.options.date_format), 1)
        output = output.replace("%interval", self.interval(entry), 1)
        now = self.context.reference_time(entry.date.tzinfo)
        output = output.replace("%shortdate", relative_date(entry.date, now), 1)
        output = output.replace("%title", self.title(entry), 1)
        if entry.section:
            output = output.replace("%section", entry.section, 1)
        output = self.recolor_tags(output)
        output = self.substitute_notes(output, entry)
        output = self.substitute_rules(output)
        return output.replace("%n", "\n").replace("%t", "\t")

    # ========== Passes ==========

    def substitute_colors(self, text: str) -> str:
        """Replace %colorname and {Xy} groups with escape sequences."""
        def replace(match: re.Match) -> str:
            name = match.group(1)
            if colors.is_color(name):
                return self.color(name)
            return match.group(0)

        text = COLOR_PATTERN.sub(replace, text)
        return colors.expand_shorthand(text, self.context.coloring)

    def interval(self, entry: Entry) -> str:
        if not self.options.times:
            return ""
        return format_interval(entry)

    def title(self, entry: Entry) -> str:
        """Entry title, wrapped and highlighted as configured."""
        title = entry.title.rstrip("\n")
        if self.options.wrap_width > 0:
            title = TITLE_CONTINUATION.join(wrap(title, self.options.wrap_width))

        if self.options.highlight and self.is_flagged(entry):
            return f"{self.color(self.options.marker_color)}{title}{self.color('default')}"
        return title

    def is_flagged(self, entry: Entry) -> bool:
        marker = re.escape(self.options.marker_tag.lstrip("@"))
        return re.search(rf"@{marker}\b", entry.title, re.IGNORECASE) is not None

    def recolor_tags(self, text: str) -> str:
        tags_color = self.options.tags_color
        if not tags_color:
            return text
        if not colors.is_color(tags_color):
            log.debug("Ignoring unknown tag color %r", tags_color)
            return text
        return recolor_tags(text, self.color(tags_color), self.color("default"))

    def substitute_notes(self, text: str, entry: Entry) -> str:
        """Expand note directives, or remove them all when there is no note."""
        note = entry.note if self.options.include_notes else ()
        if not normalize_note(note):
            return substitute_notes(text, lambda directive: "")

        def replace(directive: NoteDirective) -> str:
            if directive.style is NoteStyle.CHOMPED:
                return chomp_note(note)
            lines = format_note(note, self.options.wrap_width, directive.line_prefix)
            return "\n" + "\n".join(lines)

        return substitute_notes(text, replace)

    def substitute_rules(self, text: str) -> str:
        """Expand %hr and %hr_under to the terminal width."""
        if "%hr" not in text:
            return text
        columns = terminal_columns(self.context.columns)
        return HR_PATTERN.sub(lambda m: ("_" if m.group(1) else "-") * columns, text)


def render_entry(entry: Entry, options: RenderOptions, context: Optional[RenderContext] = None) -> str:
    """Render a single entry."""
    return TemplateRenderer(options, context).render_entry(entry)


def render_entries(
    entries: Iterable[Entry],
    options: RenderOptions,
    context: Optional[RenderContext] = None,
) -> str:
    """Render a batch of entries, appending tag totals if requested."""
    return TemplateRenderer(options, context).render(entries)
