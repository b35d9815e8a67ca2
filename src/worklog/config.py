"""Configuration loading for worklog.

Settings are merged from three layers, later layers winning:
1. Built-in defaults
2. The user config file (~/.worklog.toml or ~/.worklog.json)
3. Local .worklog.toml/.worklog.json files found walking up from the
   working directory, the nearest one last
"""

from __future__ import annotations

import copy
import json
import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Optional

# Python 3.11+ has tomllib in stdlib; fall back to tomli for older versions
try:
    import tomllib  # Python 3.11+
except ImportError:  # pragma: no cover
    import tomli as tomllib  # Python <3.11

from . import colors
from .models import RenderOptions, WorklogError

log = logging.getLogger(__name__)

USER_CONFIG_NAMES = [".worklog.toml", ".worklog.json"]
LOCAL_CONFIG_NAMES = [".worklog.toml", ".worklog.json"]

DEFAULTS: dict[str, Any] = {
    "doing_file": "~/what_was_i_doing.md",
    "marker_tag": "flagged",
    "marker_color": "red",
    "tag_sort": "name",
    "include_notes": True,
    "templates": {
        "default": {
            "date_format": "%Y-%m-%d %H:%M",
            "template": "%date | %title%note",
            "wrap_width": 0,
            "order": "asc",
        },
        "today": {
            "date_format": "%I:%M%p",
            "template": "%date: %title %interval%note",
            "wrap_width": 0,
            "order": "asc",
        },
        "last": {
            "date_format": "%I:%M%p on %a",
            "template": "%title (at %date)%odnote",
            "wrap_width": 88,
        },
        "recent": {
            "date_format": "%I:%M%p",
            "template": "%shortdate: %title (%section)",
            "wrap_width": 88,
            "count": 10,
            "order": "asc",
        },
    },
    "views": {
        "done": {
            "date_format": "%I:%M%p",
            "template": "%date | %title%note",
            "wrap_width": 0,
            "section": "All",
            "count": 0,
            "order": "desc",
        },
        "color": {
            "date_format": "%F %I:%M%p",
            "template": "%boldblack%date %boldgreen| %boldwhite%title%default%note",
            "wrap_width": 0,
            "section": "Currently",
            "count": 10,
            "order": "asc",
        },
    },
}


class ConfigError(WorklogError):
    """Raised when a config file can't be read or holds invalid values."""
    pass


@dataclass
class TemplateConfig:
    """A named output template."""
    name: str
    template: str = "%date | %title%note"
    date_format: str = "%Y-%m-%d %H:%M"
    wrap_width: int = 0
    order: str = "asc"
    count: Optional[int] = None
    section: Optional[str] = None
    tags_color: Optional[str] = None


@dataclass
class Settings:
    """Merged configuration."""

    doing_file: str = DEFAULTS["doing_file"]
    marker_tag: str = DEFAULTS["marker_tag"]
    marker_color: str = DEFAULTS["marker_color"]
    tag_sort: str = DEFAULTS["tag_sort"]
    include_notes: bool = DEFAULTS["include_notes"]

    templates: dict[str, TemplateConfig] = field(default_factory=dict)
    views: dict[str, TemplateConfig] = field(default_factory=dict)

    # Files that contributed, in merge order
    sources: list[Path] = field(default_factory=list)

    def get_log_path(self) -> Path:
        return Path(self.doing_file).expanduser()

    def get_template(self, name: str) -> Optional[TemplateConfig]:
        """Get a template by name."""
        return self.templates.get(name)

    def list_templates(self) -> list[str]:
        """List available template names."""
        return list(self.templates.keys())

    def get_view(self, name: str) -> Optional[TemplateConfig]:
        return self.views.get(name)

    def list_views(self) -> list[str]:
        return list(self.views.keys())

    def render_options(self, name: str = "default", **overrides: Any) -> RenderOptions:
        """Build render options from a named template.

        Raises:
            ConfigError: If no template has that name
        """
        tmpl = self.get_template(name)
        if tmpl is None:
            raise ConfigError(f"Template '{name}' not found. Available: {self.list_templates()}")
        return self.options_for(tmpl, **overrides)

    def view_options(self, name: str, **overrides: Any) -> RenderOptions:
        """Build render options from a named view.

        Raises:
            ConfigError: If no view has that name
        """
        view = self.get_view(name)
        if view is None:
            raise ConfigError(f"View '{name}' not found. Available: {self.list_views()}")
        return self.options_for(view, **overrides)

    def options_for(self, tmpl: TemplateConfig, **overrides: Any) -> RenderOptions:
        """Combine a template or view with the global settings."""
        values = {
            "template": tmpl.template,
            "date_format": tmpl.date_format,
            "wrap_width": tmpl.wrap_width,
            "tags_color": tmpl.tags_color,
            "sort_tags": self.tag_sort,
            "marker_tag": self.marker_tag,
            "marker_color": self.marker_color,
            "include_notes": self.include_notes,
        }
        values.update(overrides)
        return RenderOptions(**values)


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Merge override into a copy of base, recursing into nested tables."""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def load_toml_config(path: Path) -> dict[str, Any]:
    """Load configuration from TOML file."""
    with open(path, "rb") as f:
        return tomllib.load(f)


def load_json_config(path: Path) -> dict[str, Any]:
    """Load configuration from JSON file."""
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def read_config_file(path: Path) -> dict[str, Any]:
    """Read one config file.

    Raises:
        ConfigError: If the file is unreadable, malformed, or of an
            unsupported type
    """
    suffix = path.suffix.lower()
    try:
        if suffix == ".toml":
            data = load_toml_config(path)
        elif suffix == ".json":
            data = load_json_config(path)
        else:
            raise ConfigError(f"Unsupported config file type: {suffix}")
    except (OSError, tomllib.TOMLDecodeError, json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ConfigError(f"Error reading configuration {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Configuration in {path} must be a table/object")
    return data


def _template_from_dict(name: str, data: Any, base: Optional[dict[str, Any]] = None) -> TemplateConfig:
    if not isinstance(data, dict):
        raise ConfigError(f"Template '{name}' must be a table")
    merged = deep_merge(base or {}, data)
    known = {f.name for f in fields(TemplateConfig)} - {"name"}
    values = {k: v for k, v in merged.items() if k in known}

    for key in ("wrap_width", "count"):
        if key in values and values[key] is not None:
            try:
                values[key] = int(values[key])
            except (TypeError, ValueError) as e:
                raise ConfigError(f"Template '{name}': {key} must be an integer") from e

    if values.get("tags_color"):
        values["tags_color"] = colors.normalize_color(str(values["tags_color"]))

    return TemplateConfig(name=name, **values)


def _table(data: dict[str, Any], key: str) -> dict[str, Any]:
    value = data.get(key, {})
    if not isinstance(value, dict):
        raise ConfigError(f"'{key}' must be a table of named entries")
    return value


def dict_to_settings(data: dict[str, Any], sources: Optional[list[Path]] = None) -> Settings:
    """Convert a merged config dictionary to Settings.

    Named templates inherit unset keys from the "default" template.
    """
    settings = Settings(sources=list(sources or []))

    for key in ("doing_file", "marker_tag", "marker_color", "tag_sort"):
        if key in data and data[key] is not None:
            setattr(settings, key, str(data[key]))
    settings.marker_color = colors.normalize_color(settings.marker_color)
    if "include_notes" in data:
        settings.include_notes = bool(data["include_notes"])

    templates = _table(data, "templates")
    default = templates.get("default", {})
    if not isinstance(default, dict):
        raise ConfigError("Template 'default' must be a table")
    for name, tmpl_data in templates.items():
        base = None if name == "default" else default
        settings.templates[name] = _template_from_dict(name, tmpl_data, base)

    for name, view_data in _table(data, "views").items():
        settings.views[name] = _template_from_dict(name, view_data)

    return settings


def find_user_config(home: Optional[Path] = None) -> Optional[Path]:
    """Find the user config file in the home directory."""
    home = home or Path.home()
    for name in USER_CONFIG_NAMES:
        path = home / name
        if path.exists():
            return path
    return None


def find_local_configs(cwd: Optional[Path] = None, exclude: Optional[Path] = None) -> list[Path]:
    """Find per-directory config files from the filesystem root down to cwd."""
    cwd = (cwd or Path.cwd()).resolve()
    excluded = exclude.resolve() if exclude else None

    found = []
    for directory in [cwd, *cwd.parents]:
        for name in LOCAL_CONFIG_NAMES:
            path = directory / name
            if path.exists() and path.resolve() != excluded:
                found.append(path)

    found.reverse()
    return found


def load_config(
    config_path: Optional[Path] = None,
    cwd: Optional[Path] = None,
    ignore_local: bool = False,
    home: Optional[Path] = None,
) -> Settings:
    """Load and merge configuration.

    Args:
        config_path: Explicit user config file (default: auto-detect in home)
        cwd: Directory to start the local config search from
        ignore_local: Skip per-directory config files
        home: Home directory to search for the user config

    Returns:
        Settings instance

    Raises:
        ConfigError: If a config file is missing (when explicit) or invalid
    """
    data = copy.deepcopy(DEFAULTS)
    sources: list[Path] = []

    if config_path is not None:
        if not config_path.exists():
            raise ConfigError(f"Config not found ({config_path})")
        user_path: Optional[Path] = config_path
    else:
        user_path = find_user_config(home)

    if user_path is None:
        log.info("Config file doesn't exist, using default configuration")
    else:
        data = deep_merge(data, read_config_file(user_path))
        sources.append(user_path)

    if not ignore_local:
        local_paths = find_local_configs(cwd, exclude=user_path)
        if local_paths:
            log.debug("Local config files found: %s", ", ".join(str(p) for p in local_paths))
        for path in local_paths:
            data = deep_merge(data, read_config_file(path))
            sources.append(path)

    return dict_to_settings(data, sources)
