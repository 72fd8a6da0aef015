"""
Platform link normalizer.

Maps a platform key from a song record ("spotify", "deezer", ...) to the
metadata a renderer needs to draw a button for it. The mapping is total:
keys without a row in the table get the "default" row.
"""

from __future__ import annotations

from dataclasses import dataclass

from givemeasong.config import PlatformEntry, load_platform_table
from givemeasong.core.models import SongRecord

RECOGNIZED_PLATFORMS = frozenset({"spotify", "youtube_music", "deezer", "soundcloud"})

_table: dict[str, PlatformEntry] | None = None


@dataclass(frozen=True)
class PlatformDisplay:
    """Display metadata for one platform."""

    color: str
    icon: str
    label: str


@dataclass(frozen=True)
class PlatformButton:
    """A renderable link button for one platform of a song."""

    key: str
    url: str
    display: PlatformDisplay

    @property
    def aria_label(self) -> str:
        return f"Listen on {self.display.label}"


def _get_table() -> dict[str, PlatformEntry]:
    global _table

    if _table is None:
        _table = load_platform_table()

    return _table


def display_for(platform_key: str) -> PlatformDisplay:
    """
    Get display metadata for a platform key.

    Args:
        platform_key: Any string; unknown keys fall back to the default entry.

    Returns:
        PlatformDisplay for the key.
    """
    table = _get_table()
    entry = table.get(platform_key) or table["default"]
    return PlatformDisplay(color=entry.color, icon=entry.icon, label=entry.label)


def default_display() -> PlatformDisplay:
    """Display metadata used for unrecognized platforms."""
    return display_for("default")


def platform_buttons(song: SongRecord) -> list[PlatformButton]:
    """One button per platform entry with a non-empty url, in record order."""
    return [
        PlatformButton(key=key, url=link.url, display=display_for(key))  # type: ignore[arg-type]
        for key, link in song.renderable_links()
    ]
