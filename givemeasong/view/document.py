"""
Host document metadata.

HostDocument models the process-wide document state that the song view
overrides while a song is displayed: the title and the favicon link element.
DocumentMetadataSync owns that override for one mounted view. It is a scoped
resource: enter() acquires it, exit() always puts the defaults back, and
exit() does its work at most once per enter().

    with DocumentMetadataSync(document, app_name="GiveMeASong") as sync:
        workflow.add_listener(sync.observe)
        await workflow.mount(song_id)
    # title and favicon are back to their defaults here, however we left
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from givemeasong.config import Settings
from givemeasong.core.models import SongRecord
from givemeasong.workflow.states import WorkflowSnapshot

logger = logging.getLogger(__name__)


@dataclass
class FaviconLink:
    """The document's <link rel="icon"> element."""

    href: str
    rel: str = "icon"
    type: str = "image/x-icon"


@dataclass
class HostDocument:
    """Mutable document metadata shared by every view of the process."""

    title: str = ""
    favicon: FaviconLink | None = None

    @property
    def favicon_href(self) -> str | None:
        return self.favicon.href if self.favicon is not None else None

    @classmethod
    def with_defaults(cls, settings: Settings) -> HostDocument:
        return cls(title=settings.app_name, favicon=FaviconLink(href=settings.default_favicon))


def format_title(song: SongRecord, app_name: str) -> str:
    return f"{song.title} by {song.artist} | {app_name}"


class DocumentMetadataSync:
    """
    Mirrors the displayed song into the document title and favicon.

    Only one instance should be entered at a time; ownership of the document
    belongs to the currently mounted view.
    """

    def __init__(
        self,
        document: HostDocument,
        *,
        app_name: str,
        default_favicon: str = "/favicon.ico",
    ) -> None:
        self.document = document
        self.app_name = app_name
        self.default_favicon = default_favicon
        self._entered = False
        self._applied_song_id: str | None = None

    @classmethod
    def from_settings(cls, document: HostDocument, settings: Settings) -> DocumentMetadataSync:
        return cls(
            document,
            app_name=settings.app_name,
            default_favicon=settings.default_favicon,
        )

    @property
    def active(self) -> bool:
        return self._entered

    @property
    def applied_song_id(self) -> str | None:
        """Id of the song currently mirrored into the document, if any."""
        return self._applied_song_id

    def enter(self) -> DocumentMetadataSync:
        if self._entered:
            raise RuntimeError("Document metadata override already entered")
        self._entered = True
        self._applied_song_id = None
        return self

    def apply(self, song: SongRecord) -> None:
        """Set title and favicon for a song."""
        if not self._entered:
            raise RuntimeError("apply() called outside an entered override")

        self.document.title = format_title(song, self.app_name)

        href = song.cover_url or self.default_favicon
        if self.document.favicon is None:
            self.document.favicon = FaviconLink(href=href)
        else:
            self.document.favicon.href = href

        self._applied_song_id = song.id
        logger.debug("Document metadata set for song %s", song.id)

    def restore(self) -> None:
        """Put the default title and favicon back."""
        self.document.title = self.app_name
        if self.document.favicon is not None:
            self.document.favicon.href = self.default_favicon
        self._applied_song_id = None

    def observe(self, snapshot: WorkflowSnapshot) -> None:
        """Workflow listener: follow the song in and out of the Ready state."""
        if not self._entered:
            return
        song = snapshot.song
        if song is not None:
            self.apply(song)
        elif self._applied_song_id is not None:
            self.restore()

    def exit(self) -> None:
        """Release the override. Safe to call more than once."""
        if not self._entered:
            return
        self._entered = False
        self.restore()
        logger.debug("Document metadata restored to defaults")

    def __enter__(self) -> DocumentMetadataSync:
        return self.enter()

    def __exit__(self, *exc_info: object) -> None:
        self.exit()
