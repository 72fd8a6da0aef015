"""
Workflow states.

Each state is its own frozen dataclass so that only legal combinations can
exist: a Failed state has a message and no song, a Ready state has a song and
no message, and "loading" is a property of the state rather than a flag.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Union

from givemeasong.client.api import ApiError, ErrorKind
from givemeasong.core.models import SongRecord


@dataclass(frozen=True)
class Idle:
    name: ClassVar[str] = "idle"


@dataclass(frozen=True)
class Submitting:
    """A resolve request is in flight."""

    name: ClassVar[str] = "submitting"
    url: str


@dataclass(frozen=True)
class Resolved:
    """The URL resolved; navigation to the song view has been requested."""

    name: ClassVar[str] = "resolved"
    song_id: str


@dataclass(frozen=True)
class LoadingSong:
    """A song fetch is in flight."""

    name: ClassVar[str] = "loading_song"
    song_id: str


@dataclass(frozen=True)
class Ready:
    name: ClassVar[str] = "ready"
    song: SongRecord


@dataclass(frozen=True)
class Failed:
    """The current attempt failed. Terminal until the next submit or mount."""

    name: ClassVar[str] = "failed"
    message: str
    kind: ErrorKind | None = None
    status: int | None = None
    # message was written by the backend rather than the client
    from_server: bool = False

    @classmethod
    def from_error(cls, error: ApiError) -> Failed:
        return cls(
            message=error.message,
            kind=error.kind,
            status=error.status,
            from_server=error.from_server,
        )


WorkflowState = Union[Idle, Submitting, Resolved, LoadingSong, Ready, Failed]


@dataclass(frozen=True)
class WorkflowSnapshot:
    """
    What the presentation layer observes: the state plus the two derived
    values every renderer needs.
    """

    state: WorkflowState

    @property
    def song(self) -> SongRecord | None:
        return self.state.song if isinstance(self.state, Ready) else None

    @property
    def error(self) -> str | None:
        return self.state.message if isinstance(self.state, Failed) else None

    @property
    def is_loading(self) -> bool:
        return isinstance(self.state, (Submitting, LoadingSong))

    @property
    def song_id(self) -> str | None:
        if isinstance(self.state, (Resolved, LoadingSong)):
            return self.state.song_id
        if isinstance(self.state, Ready):
            return self.state.song.id
        return None
