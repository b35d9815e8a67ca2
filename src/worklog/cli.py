"""worklog command line - main entry point."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from .changelog import Changes
from .config import Settings, load_config
from .logfile import ALL_SECTIONS, guess_section, load_entries, recent, sections
from .models import RenderContext, WorklogError
from .render import render_entries

log = logging.getLogger(__name__)

DEFAULT_RECENT_COUNT = 10


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="worklog",
        description="Render entries from a plain-text activity log",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        help="Path to config file (default: ~/.worklog.toml)",
    )
    parser.add_argument(
        "--file",
        "-f",
        type=Path,
        help="Log file to read (default: doing_file from config)",
    )
    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable colored output",
    )
    parser.add_argument(
        "--ignore-local",
        action="store_true",
        help="Skip per-directory .worklog config files",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Log debug output to stderr",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    recent_parser = subparsers.add_parser("recent", help="List recent entries")
    recent_parser.add_argument(
        "count",
        nargs="?",
        type=int,
        help="Number of entries to show (default: templates.recent.count or 10)",
    )
    recent_parser.add_argument(
        "--section",
        "-s",
        help="Section to list (default: the view's section, or All)",
    )
    recent_parser.add_argument(
        "--template",
        "-t",
        help="Override the output template string",
    )
    recent_parser.add_argument(
        "--config-template",
        default="recent",
        help="Named template from the config (default: recent)",
    )
    recent_parser.add_argument(
        "--view",
        help="Named view from the config; supplies template, section, count and order",
    )
    recent_parser.add_argument(
        "--times",
        action="store_true",
        help="Show time intervals on @done tasks",
    )
    recent_parser.add_argument(
        "--totals",
        action="store_true",
        help="Show time totals per tag at the end (implies --times)",
    )
    recent_parser.add_argument(
        "--tag-sort",
        choices=["name", "time"],
        help="Sort tag totals by name or time (default: tag_sort from config)",
    )
    recent_parser.add_argument(
        "--tag-order",
        choices=["asc", "desc"],
        default="asc",
        help="Tag totals sort order",
    )

    changes_parser = subparsers.add_parser("changes", help="Show changelog entries")
    changes_parser.add_argument(
        "--changelog",
        type=Path,
        default=Path("CHANGELOG.md"),
        help="Changelog file (default: ./CHANGELOG.md)",
    )
    changes_parser.add_argument(
        "--lookup",
        "-l",
        help='Version query, e.g. "1.2", "> 1.0", "1.0 - 2.0"',
    )
    changes_parser.add_argument(
        "--search",
        "-s",
        help="Only show entries containing this text",
    )
    changes_parser.add_argument(
        "--only",
        action="store_true",
        help="List changes without version headers",
    )
    changes_parser.add_argument(
        "--latest",
        action="store_true",
        help="Only show the newest release",
    )

    return parser


def cmd_recent(args: argparse.Namespace, settings: Settings, context: RenderContext) -> str:
    """Render the most recent entries."""
    overrides = {
        "times": args.times or args.totals,
        "totals": args.totals,
        "tag_order": args.tag_order,
    }
    if args.tag_sort:
        overrides["sort_tags"] = args.tag_sort
    if args.template:
        overrides["template"] = args.template

    if args.view:
        options = settings.view_options(args.view, **overrides)
        tmpl = settings.get_view(args.view)
    else:
        options = settings.render_options(args.config_template, **overrides)
        tmpl = settings.get_template(args.config_template)

    if args.count is not None:
        count = args.count
    elif tmpl.count is not None:
        count = tmpl.count
    else:
        count = DEFAULT_RECENT_COUNT

    log_path = args.file or settings.get_log_path()
    log.debug("Reading %s with %s %r", log_path, "view" if args.view else "template", tmpl.name)
    entries = load_entries(log_path)

    section = guess_section(args.section or tmpl.section or ALL_SECTIONS, sections(entries))
    selected = recent(entries, count, section)
    if tmpl.order == "desc":
        selected.reverse()

    return render_entries(selected, options, context)


def cmd_changes(args: argparse.Namespace) -> str:
    """Render changelog sections."""
    changes = Changes.from_file(
        args.changelog,
        lookup=args.lookup,
        search=args.search,
        changes_only=args.only,
    )
    output = changes.latest() if args.latest else str(changes)
    return output if output.endswith("\n") or not output else output + "\n"


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        if args.command == "changes":
            output = cmd_changes(args)
        else:
            settings = load_config(args.config, ignore_local=args.ignore_local)
            log.debug("Config sources: %s", ", ".join(str(p) for p in settings.sources) or "defaults")
            context = RenderContext(coloring=not args.no_color and sys.stdout.isatty())
            output = cmd_recent(args, settings, context)
    except WorklogError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    sys.stdout.write(output)
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
