"""
GiveMeASong HTTP client package.

Components:
- SongApiClient: resolve and song endpoints over httpx
- ApiError / ResolutionError / FetchError: typed failures
"""

from givemeasong.client.api import (
    ApiError,
    ErrorKind,
    FetchError,
    ResolutionError,
    SongApiClient,
)

__all__ = [
    "ApiError",
    "ErrorKind",
    "FetchError",
    "ResolutionError",
    "SongApiClient",
]
