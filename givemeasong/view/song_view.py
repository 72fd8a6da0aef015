"""
Views.

A view is one mounted instance of a route. Each instance owns a fresh
SongWorkflow, so re-entering a route (or navigating to another song id)
always starts from Idle.

- SearchView ("/"): holds the URL input and submits it for resolution.
- SongView ("/song/{id}"): fetches the song on mount and holds the document
  metadata override until it is unmounted.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from givemeasong.core.events import EventBus, ViewMountedEvent, ViewUnmountedEvent, event_bus
from givemeasong.view.document import DocumentMetadataSync, HostDocument
from givemeasong.view.render import (
    Messages,
    SearchViewModel,
    SongViewModel,
    build_search_view_model,
    build_song_view_model,
)
from givemeasong.workflow.machine import SongWorkflow, song_path
from givemeasong.workflow.states import WorkflowSnapshot, WorkflowState

if TYPE_CHECKING:
    from givemeasong.client.api import SongApiClient
    from givemeasong.config import Settings

logger = logging.getLogger(__name__)


class View:
    """Common mount/unmount bookkeeping."""

    path: str = "/"

    def __init__(self, api: SongApiClient, *, bus: EventBus | None = None) -> None:
        self.bus = bus if bus is not None else event_bus
        self.workflow = SongWorkflow(api, bus=self.bus)
        self.mounted = False

    @property
    def view_id(self) -> str:
        return self.workflow.view_id

    def snapshot(self) -> WorkflowSnapshot:
        return self.workflow.snapshot()

    async def mount(self) -> None:
        self.mounted = True
        logger.info("Mounted %s (%s)", self.path, self.view_id)
        await self.bus.publish(ViewMountedEvent(view_id=self.view_id, path=self.path))

    async def unmount(self) -> None:
        # results still in flight belong to a view that is gone
        self.workflow.cancel()
        if not self.mounted:
            return
        self.mounted = False
        logger.info("Unmounted %s (%s)", self.path, self.view_id)
        await self.bus.publish(ViewUnmountedEvent(view_id=self.view_id, path=self.path))

    async def __aenter__(self):
        await self.mount()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.unmount()


class SearchView(View):
    """The URL form."""

    path = "/"

    def __init__(
        self,
        api: SongApiClient,
        settings: Settings,
        *,
        bus: EventBus | None = None,
    ) -> None:
        super().__init__(api, bus=bus)
        self.settings = settings
        self.url = ""

    async def submit(self, url: str | None = None) -> WorkflowState:
        """
        Submit the form.

        The input is required: an empty or blank value is not sent and leaves
        the state unchanged.
        """
        if url is not None:
            self.url = url
        if not self.url.strip():
            logger.debug("Ignoring empty submission")
            return self.workflow.state
        return await self.workflow.submit(self.url.strip())

    def view_model(self, messages: Messages) -> SearchViewModel:
        return build_search_view_model(
            self.snapshot(), self.url, messages, self.settings.app_name
        )


class SongView(View):
    """The song-scoped view."""

    def __init__(
        self,
        song_id: str,
        api: SongApiClient,
        document: HostDocument,
        settings: Settings,
        *,
        bus: EventBus | None = None,
    ) -> None:
        super().__init__(api, bus=bus)
        self.song_id = song_id
        self.path = song_path(song_id)
        self.metadata = DocumentMetadataSync.from_settings(document, settings)

    async def mount(self) -> None:
        """Take over the document metadata and load the song."""
        self.metadata.enter()
        self.workflow.add_listener(self.metadata.observe)
        try:
            await super().mount()
            await self.workflow.mount(self.song_id)
        except BaseException:
            await self.unmount()
            raise

    async def unmount(self) -> None:
        """Release the document metadata, whatever state we are in."""
        self.workflow.remove_listener(self.metadata.observe)
        self.metadata.exit()
        await super().unmount()

    def view_model(self, messages: Messages) -> SongViewModel:
        return build_song_view_model(self.snapshot(), messages)
