"""Tests for the template renderer."""

import dataclasses
import os
from datetime import datetime, timezone

import pytest

from worklog import render as render_module
from worklog.models import Entry, RenderContext, RenderOptions
from worklog.render import TemplateRenderer, render_entries, render_entry, terminal_columns

TITLE = "Fixed the @bug in parser"


def render(entry, context, **options):
    return render_entry(entry, RenderOptions(**options), context)


class TestScenarios:
    """End-to-end rendering of the reference entry."""

    def test_date_and_title(self, entry, plain):
        result = render(entry, plain, template="%date | %title", date_format="%Y-%m-%d %H:%M")
        assert result == "2024-01-15 09:30 | Fixed the @bug in parser"

    def test_title_and_note(self, noted_entry, plain):
        result = render(noted_entry, plain, template="%title%note")
        assert result == "Fixed the @bug in parser\n\t— first line  \n\t— second line  "

    def test_default_template(self, noted_entry, plain):
        result = render(noted_entry, plain)
        assert result.startswith("2024-01-15 09:30 | Fixed the @bug in parser\n\t— first line")


class TestPassThrough:
    """Unknown directives stay in the output."""

    def test_unknown_directive(self, entry, plain):
        result = render(entry, plain, template="%unknowndirective %title")
        assert result == f"%unknowndirective {TITLE}"

    def test_percent_text(self, entry, plain):
        assert render(entry, plain, template="100%% %title") == f"100%% {TITLE}"

    def test_missing_section_left_alone(self, entry, plain):
        no_section = dataclasses.replace(entry, section=None)
        assert render(no_section, plain, template="%title (%section)") == f"{TITLE} (%section)"

    def test_section(self, entry, plain):
        assert render(entry, plain, template="%title (%section)") == f"{TITLE} (Currently)"


class TestColors:
    """Tests for %colorname and {Xy} substitution."""

    def test_named_colors(self, entry, colored):
        result = render(entry, colored, template="%red%title%default")
        assert result == f"\x1b[31m{TITLE}\x1b[0;39m"

    def test_color_word_must_match_exactly(self, entry, colored):
        """%redx is not %red followed by x."""
        assert render(entry, colored, template="%redx") == "%redx"

    def test_underscored_name(self, entry, colored):
        assert render(entry, colored, template="%rapid_blink") == "\x1b[6m"

    def test_bright(self, entry, colored):
        assert render(entry, colored, template="%bright%title") == f"\x1b[1m{TITLE}"

    def test_shorthand(self, entry, colored):
        result = render(entry, colored, template="{r}%title{x}")
        assert result == f"\x1b[31m{TITLE}\x1b[0m"

    def test_disabled_deletes_color_tokens(self, noted_entry, plain):
        """With coloring off, color tokens simply vanish."""
        colored_template = "%boldblack%date %boldgreen| %boldwhite%title%default%note"
        bare_template = "%date | %title%note"
        assert render(noted_entry, plain, template=colored_template) == render(
            noted_entry, plain, template=bare_template
        )


class TestDates:
    """Tests for %date, %shortdate and %interval."""

    def test_date_format(self, entry, plain):
        assert render(entry, plain, template="%date", date_format="%d/%m/%Y") == "15/01/2024"

    def test_only_first_date(self, entry, plain):
        result = render(entry, plain, template="%date %date", date_format="%Y")
        assert result == "2024 %date"

    def test_shortdate(self, entry, plain):
        assert render(entry, plain, template="%shortdate: %title") == f"9:30am: {TITLE}"

    def test_shortdate_older(self, entry):
        context = RenderContext(coloring=False, now=datetime(2025, 3, 1, 8, 0))
        assert render(entry, context, template="%shortdate") == "01/15/2024 9:30am"

    def test_interval_with_times(self, plain):
        done = Entry(date=datetime(2024, 1, 15, 11), title="Review @done(2024-01-15 12:30)")
        result = render(done, plain, template="%title [%interval]", times=True)
        assert result.endswith("[1 hour, 30 minutes]")

    def test_interval_without_times(self, plain):
        done = Entry(date=datetime(2024, 1, 15, 11), title="Review @done(2024-01-15 12:30)")
        assert render(done, plain, template="[%interval]") == "[]"


class TestAwareDates:
    """Entries whose dates carry a timezone."""

    @pytest.fixture
    def aware_entry(self, entry):
        return dataclasses.replace(entry, date=entry.date.replace(tzinfo=timezone.utc))

    def test_shortdate_with_aware_now(self, aware_entry):
        context = RenderContext(coloring=False, now=datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc))
        assert render(aware_entry, context, template="%shortdate") == "9:30am"

    def test_shortdate_with_naive_now(self, aware_entry, plain):
        assert render(aware_entry, plain, template="%shortdate") == "9:30am"

    def test_shortdate_with_real_now(self, aware_entry):
        result = render(aware_entry, RenderContext(coloring=False), template="%shortdate")
        assert result.endswith("9:30am")

    def test_interval(self, plain):
        done = Entry(
            date=datetime(2024, 1, 15, 11, tzinfo=timezone.utc),
            title="Review @done(2024-01-15 12:30)",
        )
        result = render(done, plain, template="[%interval]", times=True)
        assert result == "[1 hour, 30 minutes]"


class TestTitle:
    """Tests for %title wrapping and highlighting."""

    def test_wrapped(self, entry, plain):
        result = render(entry, plain, template="%title", wrap_width=10)
        assert result == "Fixed the\n\t @bug in\n\t parser"

    def test_highlight_flagged(self, colored):
        flagged = Entry(date=datetime(2024, 1, 15), title="Important @flagged work")
        result = render(flagged, colored, template="%title", highlight=True)
        assert result == "\x1b[31mImportant @flagged work\x1b[0;39m"

    def test_highlight_case_insensitive(self, colored):
        flagged = Entry(date=datetime(2024, 1, 15), title="Important @FLAGGED")
        result = render(flagged, colored, template="%title", highlight=True, marker_color="yellow")
        assert result == "\x1b[33mImportant @FLAGGED\x1b[0;39m"

    def test_marker_needs_word_boundary(self, colored):
        other = Entry(date=datetime(2024, 1, 15), title="Has @flaggedness")
        assert render(other, colored, template="%title", highlight=True) == "Has @flaggedness"

    def test_no_highlight_unless_asked(self, colored):
        flagged = Entry(date=datetime(2024, 1, 15), title="x @flagged")
        assert render(flagged, colored, template="%title") == "x @flagged"


class TestTagColors:
    """Tests for tag recoloring."""

    def test_tags_colored(self, entry, colored):
        result = render(entry, colored, template="%title", tags_color="boldcyan")
        assert result == "Fixed the \x1b[96m@bug\x1b[0;39m in parser"

    def test_tag_returns_to_title_color(self, entry, colored):
        result = render(entry, colored, template="%boldwhite%title", tags_color="boldcyan")
        assert result == "\x1b[97mFixed the \x1b[96m@bug\x1b[97m in parser"

    def test_note_tags_untouched(self, entry, colored):
        """Notes are substituted after recoloring."""
        noted = dataclasses.replace(entry, title="plain", note=("see @other",))
        result = render(noted, colored, template="%title%odnote", tags_color="boldcyan")
        assert result == "plain\n— see @other  "

    def test_unknown_tag_color_ignored(self, entry, colored):
        assert render(entry, colored, template="%title", tags_color="nope") == TITLE

    def test_disabled_coloring(self, entry, plain):
        assert render(entry, plain, template="%title", tags_color="boldcyan") == TITLE


class TestNotes:
    """Tests for note directives."""

    def test_idnote(self, noted_entry, plain):
        result = render(noted_entry, plain, template="%title%idnote")
        assert result == f"{TITLE}\n\t\t— first line  \n\t\t— second line  "

    def test_odnote(self, noted_entry, plain):
        result = render(noted_entry, plain, template="%title%odnote")
        assert result == f"{TITLE}\n— first line  \n— second line  "

    def test_chompnote(self, noted_entry, plain):
        result = render(noted_entry, plain, template="%title %chompnote")
        assert result == f"{TITLE} — first line — second line"

    def test_custom(self, noted_entry, plain):
        result = render(noted_entry, plain, template="%title%^>t1*_note")
        assert result == f"{TITLE}\n>\t* — first line  \n>\t* — second line  "

    def test_wrapped_note(self, plain):
        entry = Entry(date=datetime(2024, 1, 15), title="t", note=("one two three four",))
        result = render(entry, plain, template="%title%note", wrap_width=9)
        assert result == "t\n\t— one two  \n\tthree  \n\tfour  "

    def test_empty_note_removes_directive(self, entry, plain):
        """%title%note with no note renders like %title alone."""
        assert render(entry, plain, template="%title%note") == render(entry, plain, template="%title")

    def test_empty_note_removes_every_variant(self, entry, plain):
        template = "%title%note%idnote%odnote%chompnote%^>t2-note|"
        assert render(entry, plain, template=template) == f"{TITLE}|"

    def test_blank_note_lines_count_as_empty(self, entry, plain):
        blank = dataclasses.replace(entry, note=("", "   "))
        assert render(blank, plain, template="%title%note") == TITLE

    def test_include_notes_off(self, noted_entry, plain):
        result = render(noted_entry, plain, template="%title%note", include_notes=False)
        assert result == TITLE

    def test_repeated_note(self, noted_entry, plain):
        """Each note directive is substituted."""
        result = render(noted_entry, plain, template="%chompnote|%chompnote")
        assert result == "— first line — second line|— first line — second line"


class TestRulesAndEscapes:
    """Tests for %hr, %hr_under, %n and %t."""

    def test_hr(self, entry, plain):
        assert render(entry, plain, template="%hr") == "-" * 40

    def test_hr_under(self, entry, plain):
        assert render(entry, plain, template="%hr_under") == "_" * 40

    def test_newline_and_tab(self, entry, plain):
        assert render(entry, plain, template="%title%n%tend") == f"{TITLE}\n\tend"


class TestTerminalColumns:
    """Tests for terminal_columns."""

    def test_override(self):
        assert terminal_columns(120) == 120

    def test_query_failure_falls_back(self, monkeypatch):
        def broken(*args, **kwargs):
            raise OSError("no terminal")

        monkeypatch.setattr(render_module.shutil, "get_terminal_size", broken)
        assert terminal_columns() == 80

    def test_zero_width_falls_back(self, monkeypatch):
        monkeypatch.setattr(
            render_module.shutil,
            "get_terminal_size",
            lambda *args, **kwargs: os.terminal_size((0, 0)),
        )
        assert terminal_columns() == 80


class TestBatch:
    """Tests for rendering several entries."""

    def test_each_entry_followed_by_newline(self, entry, plain):
        second = Entry(date=datetime(2024, 1, 15, 10), title="Second")
        result = render_entries([entry, second], RenderOptions(template="%title"), plain)
        assert result == f"{TITLE}\nSecond\n"

    def test_empty_batch(self, plain):
        assert render_entries([], RenderOptions(), plain) == ""

    def test_totals_appended_once(self, plain):
        entries = [
            Entry(date=datetime(2024, 1, 15, 11), title="Review @code @done(2024-01-15 12:30)"),
            Entry(date=datetime(2024, 1, 15, 13), title="More @code @done(2024-01-15 13:30)"),
        ]
        options = RenderOptions(template="%title", totals=True, times=True)
        result = render_entries(entries, options, plain)
        assert result.count("--- Tag Totals ---") == 1
        assert "code: 00:02:00" in result
        assert result.startswith("Review @code @done(2024-01-15 12:30)\nMore")

    def test_renderer_reuse(self, entry, noted_entry, plain):
        """Rendering is pure: the same renderer gives the same output."""
        renderer = TemplateRenderer(RenderOptions(template="%title%note"), plain)
        first = renderer.render_entry(noted_entry)
        renderer.render_entry(entry)
        assert renderer.render_entry(noted_entry) == first

    def test_default_context(self, entry):
        """A renderer without a context still works."""
        assert TemplateRenderer(RenderOptions(template="%title")).render_entry(entry) == TITLE
