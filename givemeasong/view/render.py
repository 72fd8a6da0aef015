"""
Presentation layer.

build_song_view_model() and build_search_view_model() turn a workflow
snapshot into presentation-neutral view models. A Renderer turns those into
output. Only a plain-text renderer ships; other skins implement the same
Renderer protocol and consume the same view models.

The song view model always has exactly one content section: "loading",
"song" or "error". A song is either rendered in full or not at all.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol

from givemeasong.client.api import ErrorKind
from givemeasong.core.platforms import PlatformButton, platform_buttons
from givemeasong.workflow.states import Failed, Ready, WorkflowSnapshot


@dataclass(frozen=True)
class Messages:
    """User-visible strings for one locale."""

    loading: str
    load_error: str
    by: str
    no_links: str
    back: str
    tagline: str
    input_placeholder: str
    search_button: str
    request_failed: str
    not_found: str
    api_error: str  # formatted with {status}


MESSAGES: dict[str, Messages] = {
    "en": Messages(
        loading="Loading...",
        load_error="Failed to fetch song data",
        by="by",
        no_links="No links available yet.",
        back="Back to search",
        tagline="Find your favourite song on every platform with just one link!",
        input_placeholder="Link to a song...",
        search_button="Find song",
        request_failed="Request failed",
        not_found="Song not found",
        api_error="API error: {status}",
    ),
    "uk": Messages(
        loading="Завантаження...",
        load_error="Помилка завантаження пісні",
        by="від",
        no_links="Посилань поки немає.",
        back="Назад до пошуку",
        tagline="Знайди свою улюблену пісню на всіх платформах, маючи лише одне посилання!",
        input_placeholder="Посилання на пісню...",
        search_button="Знайти пісню",
        request_failed="Не вдалося виконати запит",
        not_found="Пісню не знайдено",
        api_error="Помилка API: {status}",
    ),
}


def get_messages(locale: str) -> Messages:
    """Messages for a locale, falling back to English."""
    return MESSAGES.get(locale, MESSAGES["en"])


def failure_message(
    state: Failed, messages: Messages, generic: str, *, with_status: bool = True
) -> str:
    """
    Text shown for a failed attempt.

    Text written by the backend is shown as is. Failures the client describes
    itself are looked up by kind in the locale table, with generic as the
    fallback for transport and payload errors (and for HTTP failures when
    with_status is false).
    """
    if state.from_server or state.kind is None:
        return state.message or generic
    if state.kind is ErrorKind.NOT_FOUND:
        return messages.not_found
    if with_status and state.kind is ErrorKind.SERVER and state.status is not None:
        return messages.api_error.format(status=state.status)
    return generic


@dataclass(frozen=True)
class SongViewModel:
    section: str  # loading, song, error
    loading_label: str = ""
    title: str = ""
    artist: str = ""
    by_label: str = ""
    cover_url: str | None = None
    cover_alt: str = ""
    buttons: list[PlatformButton] = field(default_factory=list)
    no_links_label: str | None = None
    error: str | None = None
    back_label: str = ""
    back_path: str = "/"


@dataclass(frozen=True)
class SearchViewModel:
    app_name: str
    tagline: str
    url: str
    placeholder: str
    button_label: str
    button_disabled: bool
    error: str | None = None


def build_song_view_model(snapshot: WorkflowSnapshot, messages: Messages) -> SongViewModel:
    state = snapshot.state

    if isinstance(state, Ready):
        song = state.song
        buttons = platform_buttons(song)
        return SongViewModel(
            section="song",
            title=song.title,
            artist=song.artist,
            by_label=messages.by,
            cover_url=song.cover_url,
            cover_alt=f"{song.title} by {song.artist}",
            buttons=buttons,
            no_links_label=None if buttons else messages.no_links,
            back_label=messages.back,
        )

    if isinstance(state, Failed):
        return SongViewModel(
            section="error",
            error=failure_message(state, messages, messages.load_error),
            back_label=messages.back,
        )

    # Idle (about to mount) and in-flight states all show the spinner
    return SongViewModel(
        section="loading",
        loading_label=messages.loading,
        back_label=messages.back,
    )


def build_search_view_model(
    snapshot: WorkflowSnapshot,
    url: str,
    messages: Messages,
    app_name: str,
) -> SearchViewModel:
    loading = snapshot.is_loading
    state = snapshot.state
    error = None
    if isinstance(state, Failed):
        error = failure_message(state, messages, messages.request_failed, with_status=False)
    return SearchViewModel(
        app_name=app_name,
        tagline=messages.tagline,
        url=url,
        placeholder=messages.input_placeholder,
        button_label=messages.loading if loading else messages.search_button,
        button_disabled=loading,
        error=error,
    )


class Renderer(Protocol):
    """Anything that can present the two views."""

    def render_song(self, model: SongViewModel) -> str: ...

    def render_search(self, model: SearchViewModel) -> str: ...


class TextRenderer:
    """Plain-text renderer used by the CLI."""

    def render_song(self, model: SongViewModel) -> str:
        lines: list[str] = []

        if model.section == "loading":
            lines.append(model.loading_label)
        elif model.section == "error":
            lines.append(f"! {model.error}")
        else:
            if model.cover_url:
                lines.append(f"[cover] {model.cover_url}")
            lines.append(model.title)
            lines.append(model.by_label)
            lines.append(model.artist)
            lines.append("")
            for button in model.buttons:
                lines.append(f"  {button.display.label}: {button.url}")
            if model.no_links_label:
                lines.append(f"  {model.no_links_label}")

        lines.append("")
        lines.append(f"<- {model.back_label}")
        return "\n".join(lines)

    def render_search(self, model: SearchViewModel) -> str:
        lines = [
            model.app_name,
            model.tagline,
            "",
            f"> {model.url or model.placeholder}",
        ]
        if model.error:
            lines.append(f"! {model.error}")
        button = f"[{model.button_label}]"
        if model.button_disabled:
            button += " (disabled)"
        lines.append(button)
        return "\n".join(lines)
