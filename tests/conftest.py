"""
Shared fixtures: an in-process stub of the GiveMeASong backend.

The stub serves the two endpoints the client consumes, backed by the SONGS
and RESOLUTIONS tables below, and is reached through httpx.ASGITransport so
no network is involved. ControlledApi stands in for the client where a test
needs to decide when each call completes.
"""

from __future__ import annotations

import asyncio
from typing import Any

import pytest
from fastapi import FastAPI
from fastapi.responses import JSONResponse, PlainTextResponse
from httpx import ASGITransport, AsyncClient

from givemeasong.client.api import SongApiClient
from givemeasong.config import Settings
from givemeasong.core.events import EventBus
from givemeasong.core.models import SongRecord
from givemeasong.view.document import HostDocument

API_BASE = "http://test"

SPOTIFY_URL = "https://open.spotify.com/track/abc"

SONGS: dict[str, dict[str, Any]] = {
    "xyz": {
        "id": "xyz",
        "title": "Song",
        "artist": "Artist",
        "platforms": {
            "spotify": {"url": SPOTIFY_URL},
            "deezer": None,
        },
    },
    "covered": {
        "id": "covered",
        "title": "Covered Song",
        "artist": "Cover Artist",
        "cover_url": "https://img.example/cover.jpg",
        "platforms": {
            "spotify": {"url": "https://open.spotify.com/track/cov", "length": 201},
            "youtube_music": {"url": "https://music.youtube.com/watch?v=cov"},
            "tidal": {"url": "https://tidal.com/track/1"},
            "soundcloud": {"url": ""},
        },
    },
    "empty": {
        "id": "empty",
        "title": "Lonely Song",
        "artist": "Nobody",
        "platforms": {},
    },
    "nullplatforms": {
        "id": "nullplatforms",
        "title": "Ghost Song",
        "artist": "Nobody",
        "platforms": None,
    },
    "broken": {"title": "No id here"},
}

RESOLUTIONS: dict[str, str] = {
    SPOTIFY_URL: "xyz",
    "https://www.deezer.com/track/1": "covered",
    "https://soundcloud.com/nobody/lonely": "empty",
}


def create_backend() -> FastAPI:
    """Build the stub backend app."""
    app = FastAPI(title="GiveMeASong stub backend")

    @app.get("/resolve")
    async def resolve(url: str) -> Any:
        if url == "https://example.com/unsupported":
            return JSONResponse({"error": "unsupported url"}, status_code=422)
        if url == "https://example.com/crash":
            return PlainTextResponse("Internal Server Error", status_code=500)
        if url == "https://example.com/garbage":
            return PlainTextResponse("this is not json")
        if url == "https://example.com/noid":
            return {"status": "ok"}
        song_id = RESOLUTIONS.get(url)
        if song_id is None:
            return JSONResponse({"error": "Song not found"}, status_code=404)
        return {"id": song_id}

    @app.get("/song/{song_id}")
    async def song(song_id: str) -> Any:
        if song_id == "crash":
            return PlainTextResponse("Internal Server Error", status_code=500)
        if song_id == "garbage":
            return PlainTextResponse("{not json")
        data = SONGS.get(song_id)
        if data is None:
            return JSONResponse({"detail": "Not Found"}, status_code=404)
        return data

    return app


class ControlledApi:
    """API double whose calls block until the test completes them."""

    def __init__(self) -> None:
        self.resolves: list[tuple[str, asyncio.Future]] = []
        self.fetches: list[tuple[str, asyncio.Future]] = []

    async def resolve(self, raw_url: str) -> str:
        future: asyncio.Future = asyncio.get_running_loop().create_future()
        self.resolves.append((raw_url, future))
        return await future

    async def fetch_song(self, song_id: str) -> SongRecord:
        future: asyncio.Future = asyncio.get_running_loop().create_future()
        self.fetches.append((song_id, future))
        return await future


def make_song(song_id: str) -> SongRecord:
    return SongRecord(id=song_id, title=f"Title {song_id}", artist="Artist")


async def settle() -> None:
    """Let pending tasks run up to their next suspension point."""
    for _ in range(5):
        await asyncio.sleep(0)


@pytest.fixture
def backend() -> FastAPI:
    return create_backend()


@pytest.fixture
def settings() -> Settings:
    return Settings(api_base=API_BASE)


@pytest.fixture
async def http_client(backend: FastAPI) -> AsyncClient:
    """Async HTTP client wired to the stub backend."""
    transport = ASGITransport(app=backend)
    async with AsyncClient(transport=transport) as client:
        yield client


@pytest.fixture
def api(settings: Settings, http_client: AsyncClient) -> SongApiClient:
    return SongApiClient(settings, http_client)


@pytest.fixture
def bus() -> EventBus:
    return EventBus()


@pytest.fixture
def document(settings: Settings) -> HostDocument:
    return HostDocument.with_defaults(settings)
