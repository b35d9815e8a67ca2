"""Shared pytest fixtures for worklog tests."""

import dataclasses
import tempfile
from datetime import datetime
from pathlib import Path

import pytest

from worklog.models import Entry, RenderContext, RenderOptions


# Monday, 2024-01-15 at noon
NOW = datetime(2024, 1, 15, 12, 0)

SAMPLE_LOG = """\
Currently:
\t- 2024-01-15 09:30 | Fixed the @bug in parser <0123456789abcdef0123456789abcdef>
\t\tfirst line
\t\tsecond line
\t- 2024-01-15 11:00 | Reviewed @code @done(2024-01-15 12:30)
Later:
\t- 2024-01-10 08:00 | Plan the @release
Archive:
\t- 2023-12-01 10:00 | Old @bug work @done(2023-12-01 11:15)
"""


@pytest.fixture
def temp_dir():
    """Create a temporary directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def entry():
    """The entry used throughout the rendering scenarios."""
    return Entry(
        date=datetime(2024, 1, 15, 9, 30),
        title="Fixed the @bug in parser",
        section="Currently",
    )


@pytest.fixture
def noted_entry(entry):
    """Same entry with two note lines."""
    return dataclasses.replace(entry, note=("first line", "second line"))


@pytest.fixture
def options():
    """Default render options."""
    return RenderOptions()


@pytest.fixture
def plain():
    """Render context with coloring off."""
    return RenderContext(coloring=False, columns=40, now=NOW)


@pytest.fixture
def colored():
    """Render context with coloring on."""
    return RenderContext(coloring=True, columns=40, now=NOW)


@pytest.fixture
def log_file(temp_dir):
    """A log file with entries in three sections."""
    path = temp_dir / "doing.md"
    path.write_text(SAMPLE_LOG, encoding="utf-8")
    return path


@pytest.fixture
def sample_log():
    """Raw text of the sample log."""
    return SAMPLE_LOG
