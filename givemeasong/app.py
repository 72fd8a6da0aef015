"""
GiveMeASong application shell.

This module contains the GiveMeASongApp class that wires the API client,
the event bus, the host document and the views together. It plays the part
of the router: it owns the single mounted view, and when a workflow asks for
navigation it unmounts that view and mounts a fresh one for the new route.

Routes:
- "/": SearchView
- "/song/{id}": SongView
"""

from __future__ import annotations

import logging
from urllib.parse import unquote

from givemeasong.client.api import SongApiClient
from givemeasong.config import Settings, get_settings
from givemeasong.core import GiveMeASongError
from givemeasong.core.events import Event, EventBus, NavigationEvent
from givemeasong.view.document import HostDocument
from givemeasong.view.render import Renderer, TextRenderer, get_messages
from givemeasong.view.song_view import SearchView, SongView, View

logger = logging.getLogger(__name__)

SONG_ROUTE_PREFIX = "/song/"


class RouteNotFoundError(GiveMeASongError):
    """Raised when navigating to a path no view handles."""


class GiveMeASongApp:
    """
    Application shell coordinating views and navigation.

    Usage:
        async with GiveMeASongApp(settings) as app:
            await app.navigate("/")
            await app.search_view.submit("https://open.spotify.com/track/abc")
            print(app.render())
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        api: SongApiClient | None = None,
        document: HostDocument | None = None,
        bus: EventBus | None = None,
        renderer: Renderer | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self._owns_api = api is None
        self.api = api or SongApiClient(self.settings)
        # Each app gets its own bus unless one is shared explicitly
        self.bus = bus or EventBus()
        self.document = document or HostDocument.with_defaults(self.settings)
        self.renderer = renderer or TextRenderer()
        self.messages = get_messages(self.settings.locale)

        self.current_view: View | None = None
        self._started = False

    async def __aenter__(self) -> GiveMeASongApp:
        await self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def start(self) -> None:
        if self._started:
            return
        await self.bus.subscribe("navigation.request", self._on_navigation)
        self._started = True
        logger.debug("Application started (api base %s)", self.settings.api_base)

    async def close(self) -> None:
        """Unmount the current view and release the API client."""
        if self.current_view is not None:
            await self.current_view.unmount()
            self.current_view = None
        if self._started:
            await self.bus.unsubscribe("navigation.request", self._on_navigation)
            self._started = False
        if self._owns_api:
            await self.api.close()

    async def _on_navigation(self, event: Event) -> None:
        if isinstance(event, NavigationEvent):
            await self.navigate(event.path)

    def _create_view(self, path: str) -> View:
        if path in ("", "/"):
            return SearchView(self.api, self.settings, bus=self.bus)
        if path.startswith(SONG_ROUTE_PREFIX):
            song_id = unquote(path[len(SONG_ROUTE_PREFIX):].strip("/"))
            if song_id:
                return SongView(song_id, self.api, self.document, self.settings, bus=self.bus)
        raise RouteNotFoundError(f"No view for path: {path}")

    async def navigate(self, path: str) -> View:
        """
        Replace the mounted view with a fresh instance for path.

        The previous view is always unmounted first, so at most one view
        holds the document metadata at any time.
        """
        view = self._create_view(path)

        previous = self.current_view
        if previous is not None:
            await previous.unmount()

        logger.info("Navigating to %s", path)
        self.current_view = view
        await view.mount()
        return view

    async def back(self) -> View:
        """Return to the search form."""
        return await self.navigate("/")

    @property
    def search_view(self) -> SearchView:
        if not isinstance(self.current_view, SearchView):
            raise RuntimeError("Search view is not mounted")
        return self.current_view

    @property
    def song_view(self) -> SongView:
        if not isinstance(self.current_view, SongView):
            raise RuntimeError("Song view is not mounted")
        return self.current_view

    def render(self) -> str:
        """Render the mounted view with the configured renderer."""
        view = self.current_view
        if isinstance(view, SongView):
            return self.renderer.render_song(view.view_model(self.messages))
        if isinstance(view, SearchView):
            return self.renderer.render_search(view.view_model(self.messages))
        return ""
