"""
Tests for givemeasong.client.api (resolve and song endpoints).

Most tests run against the stub backend from conftest; transport failures
and request shape are checked with httpx.MockTransport.
"""

from __future__ import annotations

import httpx
import pytest

from givemeasong.client.api import (
    FETCH_FAILED_MESSAGE,
    NOT_FOUND_MESSAGE,
    REQUEST_FAILED_MESSAGE,
    ErrorKind,
    FetchError,
    ResolutionError,
    SongApiClient,
)
from givemeasong.config import Settings

from .conftest import SPOTIFY_URL


def mock_api(handler, api_base: str = "http://test") -> SongApiClient:
    """SongApiClient whose requests go to handler."""
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return SongApiClient(Settings(api_base=api_base), http)


# =============================================================================
# Resolve
# =============================================================================


class TestResolve:
    """Tests for SongApiClient.resolve()."""

    async def test_resolve_success(self, api: SongApiClient) -> None:
        assert await api.resolve(SPOTIFY_URL) == "xyz"

    async def test_server_error_message_surfaced(self, api: SongApiClient) -> None:
        with pytest.raises(ResolutionError) as exc_info:
            await api.resolve("https://example.com/unsupported")
        assert exc_info.value.message == "unsupported url"
        assert exc_info.value.kind is ErrorKind.SERVER
        assert exc_info.value.status == 422
        assert exc_info.value.from_server

    async def test_error_without_body(self, api: SongApiClient) -> None:
        with pytest.raises(ResolutionError) as exc_info:
            await api.resolve("https://example.com/crash")
        assert exc_info.value.message == REQUEST_FAILED_MESSAGE
        assert exc_info.value.status == 500
        assert not exc_info.value.from_server

    async def test_malformed_success_body(self, api: SongApiClient) -> None:
        with pytest.raises(ResolutionError) as exc_info:
            await api.resolve("https://example.com/garbage")
        assert exc_info.value.message == REQUEST_FAILED_MESSAGE
        assert exc_info.value.kind is ErrorKind.MALFORMED

    async def test_success_without_id(self, api: SongApiClient) -> None:
        with pytest.raises(ResolutionError) as exc_info:
            await api.resolve("https://example.com/noid")
        assert exc_info.value.kind is ErrorKind.MALFORMED

    async def test_empty_url_rejected_without_request(self) -> None:
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(200, json={"id": "x"})

        api = mock_api(handler)
        with pytest.raises(ValueError):
            await api.resolve("")
        assert calls == []

    async def test_request_shape(self) -> None:
        """One GET with the URL percent-encoded and a JSON Accept header."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"id": "xyz"})

        api = mock_api(handler, api_base="https://api.example.com/gmas/")
        await api.resolve("https://open.spotify.com/track/abc?si=1&x=2")

        assert len(seen) == 1
        request = seen[0]
        assert request.method == "GET"
        assert request.headers["accept"] == "application/json"
        assert request.url.path == "/gmas/resolve"
        assert request.url.params["url"] == "https://open.spotify.com/track/abc?si=1&x=2"

    async def test_network_failure(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        api = mock_api(handler)
        with pytest.raises(ResolutionError) as exc_info:
            await api.resolve(SPOTIFY_URL)
        assert exc_info.value.message == REQUEST_FAILED_MESSAGE
        assert exc_info.value.kind is ErrorKind.NETWORK
        assert exc_info.value.status is None

    async def test_no_retry(self) -> None:
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(503)

        api = mock_api(handler)
        with pytest.raises(ResolutionError):
            await api.resolve(SPOTIFY_URL)
        assert len(calls) == 1


# =============================================================================
# Fetch
# =============================================================================


class TestFetchSong:
    """Tests for SongApiClient.fetch_song()."""

    async def test_fetch_success(self, api: SongApiClient) -> None:
        song = await api.fetch_song("xyz")
        assert song.id == "xyz"
        assert song.title == "Song"
        assert song.artist == "Artist"
        assert song.platforms["deezer"] is None

    async def test_not_found(self, api: SongApiClient) -> None:
        with pytest.raises(FetchError) as exc_info:
            await api.fetch_song("missing")
        assert exc_info.value.status == 404
        assert exc_info.value.kind is ErrorKind.NOT_FOUND
        assert exc_info.value.message == NOT_FOUND_MESSAGE

    async def test_server_error_tagged_with_status(self, api: SongApiClient) -> None:
        with pytest.raises(FetchError) as exc_info:
            await api.fetch_song("crash")
        assert exc_info.value.status == 500
        assert exc_info.value.message == "API error: 500"

    async def test_unparsable_body(self, api: SongApiClient) -> None:
        with pytest.raises(FetchError) as exc_info:
            await api.fetch_song("garbage")
        assert exc_info.value.kind is ErrorKind.MALFORMED
        assert exc_info.value.message == FETCH_FAILED_MESSAGE

    async def test_unexpected_shape(self, api: SongApiClient) -> None:
        with pytest.raises(FetchError) as exc_info:
            await api.fetch_song("broken")
        assert exc_info.value.kind is ErrorKind.MALFORMED

    async def test_network_failure(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        api = mock_api(handler)
        with pytest.raises(FetchError) as exc_info:
            await api.fetch_song("xyz")
        assert exc_info.value.kind is ErrorKind.NETWORK
        assert exc_info.value.status is None

    async def test_song_id_encoded_as_path_segment(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(404)

        api = mock_api(handler)
        with pytest.raises(FetchError):
            await api.fetch_song("a/b")
        assert seen[0].url.raw_path == b"/song/a%2Fb"


class TestResolveThenFetch:
    """Resolving and fetching the same URL twice gives the same record id."""

    async def test_idempotent_pair(self, api: SongApiClient) -> None:
        first = await api.fetch_song(await api.resolve(SPOTIFY_URL))
        second = await api.fetch_song(await api.resolve(SPOTIFY_URL))
        assert first.id == second.id == "xyz"


class TestClientLifecycle:
    """Tests for client ownership."""

    async def test_owned_client_closed(self) -> None:
        api = SongApiClient(Settings(api_base="http://test", timeout=2.5))
        assert api._http.timeout.connect == 2.5
        await api.close()
        assert api._http.is_closed

    async def test_borrowed_client_left_open(self, http_client: httpx.AsyncClient) -> None:
        async with SongApiClient(Settings(api_base="http://test"), http_client):
            pass
        assert not http_client.is_closed
