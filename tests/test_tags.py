"""Tests for tag detection and recoloring."""

from worklog.tags import find_tags, recolor_tags

TAG = "\x1b[96m"
DEFAULT = "\x1b[0;39m"


class TestRecolorTags:
    """Tests for recolor_tags."""

    def test_plain_text_closes_with_default(self):
        result = recolor_tags("Fixed the @bug in parser", TAG, DEFAULT)
        assert result == f"Fixed the {TAG}@bug{DEFAULT} in parser"

    def test_closes_with_surrounding_color(self):
        """Each tag returns to the last color seen before it."""
        text = "\x1b[97mtitle @bug \x1b[32mgreen @x"
        result = recolor_tags(text, TAG, DEFAULT)
        assert result == f"\x1b[97mtitle {TAG}@bug\x1b[97m \x1b[32mgreen {TAG}@x\x1b[32m"

    def test_tag_right_after_escape(self):
        result = recolor_tags("\x1b[33m@tag", TAG, DEFAULT)
        assert result == f"\x1b[33m{TAG}@tag\x1b[33m"

    def test_tag_at_start(self):
        assert recolor_tags("@start here", TAG, DEFAULT) == f"{TAG}@start{DEFAULT} here"

    def test_stops_at_paren(self):
        result = recolor_tags("ok @done(2024-01-15 12:30)", TAG, DEFAULT)
        assert result == f"ok {TAG}@done{DEFAULT}(2024-01-15 12:30)"

    def test_ignores_email(self):
        """An @ inside a word is not a tag."""
        assert recolor_tags("mail me@example.com", TAG, DEFAULT) == "mail me@example.com"

    def test_empty_colors_leave_text_alone(self):
        text = "a @b c"
        assert recolor_tags(text, "", "") == text


class TestFindTags:
    """Tests for find_tags."""

    def test_names_in_order(self):
        assert find_tags("Did @a and @b(1) then @A") == ["a", "b", "a"]

    def test_ignores_escapes(self):
        assert find_tags("\x1b[31m@red text") == ["red"]

    def test_trailing_punctuation(self):
        assert find_tags("fixed @bug.") == ["bug"]

    def test_none(self):
        assert find_tags("no tags, me@example.com") == []
