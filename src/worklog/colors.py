"""Terminal color names and ANSI escape handling.

Color names are resolved through a single lookup table. Every function takes
an explicit ``coloring`` switch instead of reading process-wide state; with
coloring off every name resolves to an empty string.
"""

from __future__ import annotations

import re

# name -> SGR parameters
ATTRIBUTES: dict[str, str] = {
    "clear": "0",
    "reset": "0",
    "bold": "1",
    "dark": "2",
    "italic": "3",                # not widely implemented
    "underline": "4",
    "underscore": "4",
    "blink": "5",
    "rapid_blink": "6",           # not widely implemented
    "negative": "7",
    "concealed": "8",
    "strikethrough": "9",         # not widely implemented
    "strike": "9",
    "black": "30",
    "red": "31",
    "green": "32",
    "yellow": "33",
    "blue": "34",
    "magenta": "35",
    "purple": "35",
    "cyan": "36",
    "white": "37",
    "bgblack": "40",
    "bgred": "41",
    "bggreen": "42",
    "bgyellow": "43",
    "bgblue": "44",
    "bgmagenta": "45",
    "bgpurple": "45",
    "bgcyan": "46",
    "bgwhite": "47",
    "boldblack": "90",
    "boldred": "91",
    "boldgreen": "92",
    "boldyellow": "93",
    "boldblue": "94",
    "boldmagenta": "95",
    "boldpurple": "95",
    "boldcyan": "96",
    "boldwhite": "97",
    "boldbgblack": "100",
    "boldbgred": "101",
    "boldbggreen": "102",
    "boldbgyellow": "103",
    "boldbgblue": "104",
    "boldbgmagenta": "105",
    "boldbgpurple": "105",
    "boldbgcyan": "106",
    "boldbgwhite": "107",
    "softpurple": "0;35;40",
    "hotpants": "7;34;40",
    "knightrider": "7;30;40",
    "flamingo": "7;31;47",
    "yeller": "1;37;43",
    "whiteboard": "1;30;47",
    "chalkboard": "1;37;40",
    "led": "0;32;40",
    "redacted": "0;30;40",
    "alert": "1;31;43",
    "error": "1;37;41",
    "default": "0;39",
}

# brightwhite is accepted anywhere boldwhite is
ATTRIBUTES.update({
    name.replace("bold", "bright", 1): params
    for name, params in list(ATTRIBUTES.items())
    if name.startswith("bold")
})

ESCAPES: dict[str, str] = {name: f"\x1b[{params}m" for name, params in ATTRIBUTES.items()}

# ESC [ parameters m
ESCAPE_PATTERN = re.compile(r"\x1b\[[0-9;]*m")

# Single-letter codes for the {Xy} shorthand; uppercase is background
SHORTHAND: dict[str, str] = {
    "w": "white", "k": "black", "g": "green", "l": "blue",
    "y": "yellow", "c": "cyan", "m": "magenta", "r": "red",
    "W": "bgwhite", "K": "bgblack", "G": "bggreen", "L": "bgblue",
    "Y": "bgyellow", "C": "bgcyan", "M": "bgmagenta", "R": "bgred",
    "b": "bold", "u": "underline", "i": "italic", "x": "reset",
}

SHORTHAND_PATTERN = re.compile(r"\{(\w+)\}")


def is_color(name: str) -> bool:
    """Check whether name is a known color (case-sensitive)."""
    return name in ESCAPES


def resolve(name: str, coloring: bool = True) -> str:
    """Return the escape sequence for a color name.

    Unknown names and disabled coloring both give an empty string.
    """
    if not coloring:
        return ""
    return ESCAPES.get(name, "")


def strip(text: str) -> str:
    """Remove all ANSI color sequences from text."""
    return ESCAPE_PATTERN.sub("", text)


def normalize_color(name: str) -> str:
    """Normalize a color name.

    Removes underscores, replaces "bright" with "bold" and converts "bgbold"
    to "boldbg". Names that are already valid are returned unchanged.
    """
    if name in ESCAPES:
        return name
    name = name.replace("_", "")
    name = re.sub(r"bright", "bold", name, count=1, flags=re.IGNORECASE)
    return name.replace("bgbold", "boldbg", 1)


def expand_shorthand(text: str, coloring: bool = True) -> str:
    """Expand {Xy} color groups, e.g. "{Rwb}Warning:{x}".

    Groups containing a letter outside the shorthand alphabet are left as is.
    """
    def replace(match: re.Match) -> str:
        codes = match.group(1)
        if not all(c in SHORTHAND for c in codes):
            return match.group(0)
        return "".join(resolve(SHORTHAND[c], coloring) for c in codes)

    return SHORTHAND_PATTERN.sub(replace, text)
