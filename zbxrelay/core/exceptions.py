"""Exception hierarchy for configuration loading."""

from __future__ import annotations


class ConfigError(Exception):
    """Configuration is missing, unreadable, or invalid."""
