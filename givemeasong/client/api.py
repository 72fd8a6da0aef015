"""
HTTP client for the GiveMeASong backend.

Two operations are exposed:
- resolve(raw_url): GET {api_base}/resolve?url=... -> canonical song id
- fetch_song(song_id): GET {api_base}/song/{id} -> SongRecord

Both raise an ApiError subclass on failure. Nothing is retried; the caller
decides what to do with a failure.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any
from urllib.parse import quote

import httpx

from givemeasong.config import Settings
from givemeasong.core import GiveMeASongError, MalformedRecordError
from givemeasong.core.models import SongRecord

logger = logging.getLogger(__name__)

REQUEST_FAILED_MESSAGE = "Request failed"
FETCH_FAILED_MESSAGE = "Failed to fetch song data"
NOT_FOUND_MESSAGE = "Song not found"


class ErrorKind(Enum):
    """Failure categories reported by the API client."""

    NETWORK = "network"
    SERVER = "server"
    MALFORMED = "malformed"
    NOT_FOUND = "not_found"


class ApiError(GiveMeASongError):
    """Base class for API client failures."""

    def __init__(
        self,
        message: str,
        kind: ErrorKind,
        status: int | None = None,
        *,
        from_server: bool = False,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.kind = kind
        self.status = status
        self.from_server = from_server

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r}, kind={self.kind.value}, status={self.status})"


class ResolutionError(ApiError):
    """Raised when a raw URL cannot be resolved to a song id."""


class FetchError(ApiError):
    """Raised when a song record cannot be fetched."""


def _error_message(response: httpx.Response) -> str | None:
    """Extract the "error" string from a JSON error body, if there is one."""
    try:
        data = response.json()
    except ValueError:
        return None
    if isinstance(data, dict):
        error = data.get("error")
        if isinstance(error, str) and error:
            return error
    return None


class SongApiClient:
    """
    Async client for the resolve and song endpoints.

    Usage:
        async with SongApiClient(settings) as api:
            song_id = await api.resolve("https://open.spotify.com/track/abc")
            song = await api.fetch_song(song_id)

    An existing httpx.AsyncClient can be passed in (e.g. one with a mock or
    ASGI transport); it is then owned by the caller and not closed here.
    """

    def __init__(
        self,
        settings: Settings,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.api_base = settings.api_base
        self._owns_client = http_client is None
        if http_client is None:
            kwargs: dict[str, Any] = {}
            if settings.timeout is not None:
                kwargs["timeout"] = settings.timeout
            http_client = httpx.AsyncClient(**kwargs)
        self._http = http_client

    async def __aenter__(self) -> SongApiClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def close(self) -> None:
        if self._owns_client:
            await self._http.aclose()

    async def resolve(self, raw_url: str) -> str:
        """
        Resolve a platform URL to a canonical song id.

        Args:
            raw_url: Any streaming platform URL. Must be non-empty; no other
                validation happens client-side.

        Returns:
            The canonical song id.

        Raises:
            ValueError: If raw_url is empty.
            ResolutionError: On any transport, server or payload failure.
        """
        if not raw_url:
            raise ValueError("raw_url must not be empty")

        url = f"{self.api_base}/resolve?url={quote(raw_url, safe='')}"
        logger.debug("Resolving %s", raw_url)

        try:
            response = await self._http.get(url, headers={"Accept": "application/json"})
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.warning("Resolve request failed: %s", e)
            raise ResolutionError(REQUEST_FAILED_MESSAGE, ErrorKind.NETWORK) from e

        if not response.is_success:
            message = _error_message(response)
            logger.warning("Resolve returned %d: %s", response.status_code, message)
            if message is not None:
                raise ResolutionError(
                    message, ErrorKind.SERVER, response.status_code, from_server=True
                )
            raise ResolutionError(
                REQUEST_FAILED_MESSAGE, ErrorKind.SERVER, response.status_code
            )

        try:
            data = response.json()
        except ValueError as e:
            raise ResolutionError(
                REQUEST_FAILED_MESSAGE, ErrorKind.MALFORMED, response.status_code
            ) from e

        song_id = data.get("id") if isinstance(data, dict) else None
        if not isinstance(song_id, str) or not song_id:
            raise ResolutionError(
                REQUEST_FAILED_MESSAGE, ErrorKind.MALFORMED, response.status_code
            )

        logger.debug("Resolved %s -> %s", raw_url, song_id)
        return song_id

    async def fetch_song(self, song_id: str) -> SongRecord:
        """
        Fetch the aggregated record for a song id.

        Raises:
            FetchError: Tagged with the HTTP status for non-2xx responses,
                or generic for transport and payload failures.
        """
        url = f"{self.api_base}/song/{quote(song_id, safe='')}"
        logger.debug("Fetching song %s", song_id)

        try:
            response = await self._http.get(url)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.warning("Song request failed: %s", e)
            raise FetchError(FETCH_FAILED_MESSAGE, ErrorKind.NETWORK) from e

        if response.status_code == 404:
            raise FetchError(NOT_FOUND_MESSAGE, ErrorKind.NOT_FOUND, 404)
        if not response.is_success:
            raise FetchError(
                f"API error: {response.status_code}",
                ErrorKind.SERVER,
                response.status_code,
            )

        try:
            return SongRecord.from_dict(response.json())
        except (ValueError, MalformedRecordError) as e:
            logger.warning("Malformed song payload for %s: %s", song_id, e)
            raise FetchError(
                FETCH_FAILED_MESSAGE, ErrorKind.MALFORMED, response.status_code
            ) from e
