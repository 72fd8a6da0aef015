"""
Core domain package.

This package contains the song data model, the platform display table and
the event bus. It is independent of any UI layer (CLI, renderers) and free of
networking concerns.

We intentionally keep exports minimal; consumers should usually import from the
specific module they need (e.g. `givemeasong.core.models`).
"""

from __future__ import annotations

__all__: list[str] = [
    "GiveMeASongError",
    "ConfigError",
    "MalformedRecordError",
]


class GiveMeASongError(Exception):
    """Base class for all GiveMeASong exceptions."""


class ConfigError(GiveMeASongError):
    """Raised when a configuration file is missing required data."""


class MalformedRecordError(GiveMeASongError):
    """Raised when a song payload does not have the expected shape."""
