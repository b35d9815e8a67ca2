"""worklog - render a plain-text activity log through %directive templates."""

__version__ = "0.1.0"
