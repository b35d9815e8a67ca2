"""Changelog reader with version lookup and search.

Expects markdown of the form:

    ### 1.2.0

    #### NEW

    - Added a thing

    #### FIXED

    - Fixed another thing
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from .models import WorklogError

CHANGE_PATTERN = re.compile(r"^### (\d+\.\d+\.\d+\w*)(.*?)(?=^### |\Z)", re.MULTILINE | re.DOTALL)
VERSION_PATTERN = re.compile(r"(\d+)(?:\.(\d+))?(?:\.(\d+))?(\w*)")
TYPE_PATTERN = re.compile(r"^#### (.+?)\s*$")


class ChangelogError(WorklogError):
    """Raised for a missing changelog or an unusable version query."""
    pass


class Version:
    """A dotted version number, optionally followed by a suffix (1.2.3pre)."""

    def __init__(self, text: str):
        match = VERSION_PATTERN.search(text)
        if match is None:
            raise ChangelogError(f"Invalid version: {text!r}")
        self.major = int(match.group(1))
        self.minor = int(match.group(2) or 0)
        self.patch = int(match.group(3) or 0)
        self.suffix = match.group(4) or ""
        # How many components were actually written, for equality lookups
        self.precision = 1 + sum(1 for g in (match.group(2), match.group(3)) if g is not None)

    @property
    def parts(self) -> tuple[int, int, int]:
        return (self.major, self.minor, self.patch)

    def compare(self, other: Version, comp: str) -> bool:
        """Compare against other.

        Args:
            other: Version to compare with
            comp: "older" (self < other), "newer" (self > other) or "equal";
                equality only looks at the components other spells out
        """
        if comp == "older":
            return self.parts < other.parts
        if comp == "newer":
            return self.parts > other.parts
        return self.parts[:other.precision] == other.parts[:other.precision]

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}{self.suffix}"

    def __repr__(self) -> str:
        return f"Version({str(self)!r})"


@dataclass
class ChangeEntry:
    """One bullet from a release."""
    change_type: str
    text: str

    def __str__(self) -> str:
        return f"- {self.text}"


class Change:
    """One release section of the changelog."""

    def __init__(self, version: str, content: str):
        self.version = Version(version)
        self.content = content
        self.entries: list[ChangeEntry] = self._parse_entries(content)

    @staticmethod
    def _parse_entries(content: str) -> list[ChangeEntry]:
        entries = []
        change_type = ""
        for line in content.splitlines():
            header = TYPE_PATTERN.match(line.strip())
            if header:
                change_type = header.group(1).upper()
            elif line.strip().startswith("- "):
                entries.append(ChangeEntry(change_type, line.strip()[2:].strip()))
        return entries

    def search_entries(self, query: str) -> Optional[list[ChangeEntry]]:
        """Entries whose text contains query (case-insensitive), or None."""
        needle = query.lower()
        matches = [e for e in self.entries if needle in e.text.lower()]
        return matches or None

    def changes_only(self) -> str:
        return "".join(f"{e}\n" for e in self.entries)

    def __str__(self) -> str:
        if not self.entries:
            return f"### {self.version}\n\n{self.content}".rstrip()

        lines = [f"### {self.version}"]
        current_type = None
        for entry in self.entries:
            if entry.change_type != current_type:
                current_type = entry.change_type
                if current_type:
                    lines.extend(["", f"#### {current_type}"])
                lines.append("")
            lines.append(str(entry))
        return "\n".join(lines)


class Changes:
    """All releases in a changelog, optionally narrowed by version or text."""

    def __init__(
        self,
        content: str,
        lookup: Optional[str] = None,
        search: Optional[str] = None,
        changes_only: bool = False,
    ):
        self.changes_only = changes_only
        self.changes: list[Change] = [
            Change(version, body.strip())
            for version, body in CHANGE_PATTERN.findall(content)
        ]
        if lookup is not None:
            self.lookup(lookup)
        if search is not None:
            self.search(search)

    @classmethod
    def from_file(cls, path: Union[str, Path], **kwargs) -> Changes:
        """Read a changelog file.

        Raises:
            ChangelogError: If the file doesn't exist
        """
        path = Path(path)
        if not path.exists():
            raise ChangelogError(f"Error locating changelog ({path})")
        return cls(path.read_text(encoding="utf-8"), **kwargs)

    def lookup(self, query: str) -> None:
        """Keep only the releases matching a version query.

        Accepts "1.2.3", "> 1.2", "< 2", "since 1.0", "before 2.0",
        ranges like "1.0 - 2.0" and several clauses like "> 1.0 < 2.0".
        """
        range_match = re.match(r"\s*([\d.]+) *-+ *([\d.]+)", query)
        if range_match:
            self.lookup(f"> {range_match.group(1)}")
            self.lookup(f"< {range_match.group(2)}")
            return

        if len(re.findall(r"[<>]", query)) > 1:
            for clause in re.findall(r"[<>] *[\d.]+", query):
                self.lookup(clause)
            return

        if re.search(r"<|prior|before|older", query):
            comp = "older"
        elif re.search(r">|since|after|newer", query):
            comp = "newer"
        else:
            comp = "equal"

        version = Version(query)
        self.changes = [c for c in self.changes if c.version.compare(version, comp)]

    def search(self, query: str) -> None:
        """Keep only entries containing query, dropping emptied releases."""
        kept = []
        for change in self.changes:
            entries = change.search_entries(query)
            if entries:
                change.entries = entries
                kept.append(change)
        self.changes = kept

    def latest(self) -> str:
        if not self.changes:
            return ""
        change = self.changes[0]
        return change.changes_only() if self.changes_only else str(change)

    def __str__(self) -> str:
        if self.changes_only:
            return "".join(c.changes_only() for c in self.changes)
        return "\n\n".join(str(c) for c in self.changes)
