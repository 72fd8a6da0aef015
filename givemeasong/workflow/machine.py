"""
Song workflow state machine.

Orchestrates the two backend calls (resolve, fetch) for one view instance and
exposes a single observable state. It is the only place where state
transitions happen:

    Idle --submit(url)--> Submitting --ok--> Resolved (+ navigation request)
                                     --err-> Failed
    any  --mount(id)----> LoadingSong --ok--> Ready
                                      --err-> Failed

Failures from the API client never propagate past this class; they become a
Failed state carrying the error message.

Overlapping attempts use latest-wins semantics: every submit/mount takes a new
generation number, and a result that comes back after a newer attempt has
started is discarded. cancel() discards every attempt in flight, which is
what a view does when it is unmounted.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable
from urllib.parse import quote

from givemeasong.client.api import ApiError, SongApiClient
from givemeasong.core.events import EventBus, NavigationEvent, WorkflowStateEvent, event_bus
from givemeasong.workflow.states import (
    Failed,
    Idle,
    LoadingSong,
    Ready,
    Resolved,
    Submitting,
    WorkflowSnapshot,
    WorkflowState,
)

logger = logging.getLogger(__name__)

StateListener = Callable[[WorkflowSnapshot], None]


def song_path(song_id: str) -> str:
    """Route of the song-scoped view for an id. The id is a single path segment."""
    return f"/song/{quote(song_id, safe='')}"


class SongWorkflow:
    """
    State machine for one view instance.

    Usage:
        workflow = SongWorkflow(api)
        workflow.add_listener(lambda snap: print(snap.state.name))
        await workflow.submit("https://open.spotify.com/track/abc")
    """

    def __init__(
        self,
        api: SongApiClient,
        *,
        bus: EventBus | None = None,
        view_id: str | None = None,
    ) -> None:
        self._api = api
        self._bus = bus if bus is not None else event_bus
        self.view_id = view_id or uuid.uuid4().hex[:8]
        self._state: WorkflowState = Idle()
        self._generation = 0
        self._listeners: list[StateListener] = []

    @property
    def state(self) -> WorkflowState:
        return self._state

    @property
    def generation(self) -> int:
        return self._generation

    def snapshot(self) -> WorkflowSnapshot:
        return WorkflowSnapshot(self._state)

    def add_listener(self, listener: StateListener) -> None:
        """Call listener synchronously on every state change."""
        self._listeners.append(listener)

    def remove_listener(self, listener: StateListener) -> None:
        try:
            self._listeners.remove(listener)
        except ValueError:
            pass

    def _next_generation(self) -> int:
        self._generation += 1
        return self._generation

    def cancel(self) -> None:
        """
        Invalidate any attempt in flight.

        Its result is discarded when it arrives: no state change and no
        navigation request. The current state is left as it is.
        """
        self._generation += 1
        logger.debug("[%s] Cancelled attempts up to %d", self.view_id, self._generation - 1)

    def _is_stale(self, generation: int, what: str) -> bool:
        if generation != self._generation:
            logger.debug(
                "[%s] Discarding %s result from attempt %d (current attempt %d)",
                self.view_id,
                what,
                generation,
                self._generation,
            )
            return True
        return False

    async def _set_state(self, state: WorkflowState) -> None:
        previous = self._state
        self._state = state
        logger.debug("[%s] %s -> %s", self.view_id, previous.name, state.name)

        snapshot = self.snapshot()
        for listener in list(self._listeners):
            listener(snapshot)

        await self._bus.publish(
            WorkflowStateEvent(
                view_id=self.view_id,
                state=state.name,
                song_id=snapshot.song_id,
                error=snapshot.error,
            )
        )

    async def submit(self, url: str) -> WorkflowState:
        """
        Resolve a raw platform URL and request navigation to its song view.

        Args:
            url: Raw URL as typed by the user. Must be non-empty.

        Returns:
            The state after this attempt (Resolved or Failed), or the current
            state if the attempt was superseded.
        """
        if not url:
            raise ValueError("url must not be empty")

        generation = self._next_generation()
        await self._set_state(Submitting(url=url))

        try:
            song_id = await self._api.resolve(url)
        except ApiError as e:
            if not self._is_stale(generation, "resolve"):
                logger.warning("[%s] Resolve failed for %s: %s", self.view_id, url, e.message)
                await self._set_state(Failed.from_error(e))
            return self._state

        if self._is_stale(generation, "resolve"):
            return self._state

        await self._set_state(Resolved(song_id=song_id))
        logger.info("[%s] Resolved %s -> %s", self.view_id, url, song_id)
        await self._bus.publish(NavigationEvent(path=song_path(song_id)))
        return self._state

    async def mount(self, song_id: str) -> WorkflowState:
        """
        Load the song record for a song-scoped view.

        Returns:
            The state after this attempt (Ready or Failed), or the current
            state if the attempt was superseded.
        """
        generation = self._next_generation()
        await self._set_state(LoadingSong(song_id=song_id))

        try:
            song = await self._api.fetch_song(song_id)
        except ApiError as e:
            if not self._is_stale(generation, "fetch"):
                logger.warning("[%s] Fetch failed for %s: %s", self.view_id, song_id, e.message)
                await self._set_state(Failed.from_error(e))
            return self._state

        if self._is_stale(generation, "fetch"):
            return self._state

        await self._set_state(Ready(song=song))
        return self._state
