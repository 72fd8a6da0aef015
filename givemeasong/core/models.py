"""
Song record model.

A SongRecord is the canonical, aggregated view of one song across all
streaming platforms. It is created from the JSON body of the song endpoint
and never mutated afterwards.

Wire format (snake_case, as served by the backend):

    {
        "id": "xyz",
        "title": "Song",
        "artist": "Artist",
        "cover_url": "https://...",
        "platforms": {
            "spotify": {"url": "https://open.spotify.com/track/abc", "length": 215},
            "deezer": null
        }
    }

A platform value of null is an explicit absence marker. Entries without a
non-empty "url" are kept on the record but are never rendered.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any

from givemeasong.core import MalformedRecordError

# Keys of a platform entry that map onto PlatformLink fields
_LINK_KEYS = frozenset({"url", "title", "artists", "album", "cover_url", "length"})


@dataclass(frozen=True)
class PlatformLink:
    """One platform's entry for a song."""

    url: str | None = None
    title: str | None = None
    artists: str | list[str] | None = None
    album: str | None = None
    cover_url: str | None = None
    length_seconds: float | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def is_renderable(self) -> bool:
        """True if the entry carries a usable link."""
        return bool(self.url)

    @property
    def artist_names(self) -> list[str]:
        """Artists as a list, whether the backend sent a string or a list."""
        if not self.artists:
            return []
        if isinstance(self.artists, str):
            return [self.artists]
        return [str(a) for a in self.artists if a]

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> PlatformLink:
        url = data.get("url")
        length = data.get("length")
        return cls(
            url=url if isinstance(url, str) else None,
            title=data.get("title"),
            artists=data.get("artists"),
            album=data.get("album"),
            cover_url=data.get("cover_url"),
            length_seconds=length if isinstance(length, (int, float)) else None,
            extra={k: v for k, v in data.items() if k not in _LINK_KEYS},
        )


@dataclass(frozen=True)
class SongRecord:
    """
    Canonical song record returned by the song endpoint.

    Attributes:
        id: Opaque identifier assigned by the resolution service.
        title: Display title.
        artist: Display artist.
        cover_url: Optional artwork URL.
        platforms: Platform key -> PlatformLink, or None for an explicit absence.
    """

    id: str
    title: str
    artist: str
    cover_url: str | None = None
    platforms: dict[str, PlatformLink | None] = field(default_factory=dict)
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, payload: Any) -> SongRecord:
        """
        Build a record from a decoded JSON payload.

        Raises:
            MalformedRecordError: If the payload is not an object or lacks
                a non-empty id, title or artist.
        """
        if not isinstance(payload, Mapping):
            raise MalformedRecordError(
                f"Expected a JSON object, got {type(payload).__name__}"
            )

        for key in ("id", "title", "artist"):
            value = payload.get(key)
            if not isinstance(value, str) or not value:
                raise MalformedRecordError(f"Missing or empty field: {key}")

        raw_platforms = payload.get("platforms") or {}
        if not isinstance(raw_platforms, Mapping):
            raise MalformedRecordError("Field 'platforms' must be an object")

        platforms: dict[str, PlatformLink | None] = {}
        for key, entry in raw_platforms.items():
            # Anything that is not an object counts as "no entry"
            platforms[str(key)] = (
                PlatformLink.from_dict(entry) if isinstance(entry, Mapping) else None
            )

        cover_url = payload.get("cover_url")
        return cls(
            id=payload["id"],
            title=payload["title"],
            artist=payload["artist"],
            cover_url=cover_url if isinstance(cover_url, str) and cover_url else None,
            platforms=platforms,
            extra={
                k: v
                for k, v in payload.items()
                if k not in ("id", "title", "artist", "cover_url", "platforms")
            },
        )

    def renderable_links(self) -> Iterator[tuple[str, PlatformLink]]:
        """Yield (platform_key, link) for entries with a non-empty url, in payload order."""
        for key, link in self.platforms.items():
            if link is not None and link.is_renderable:
                yield key, link

    @property
    def has_links(self) -> bool:
        return any(True for _ in self.renderable_links())
