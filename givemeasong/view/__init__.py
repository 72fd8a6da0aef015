"""
GiveMeASong view layer.

Components:
- HostDocument / DocumentMetadataSync: document title and favicon override
- SearchView / SongView: mounted route instances driving a SongWorkflow
- TextRenderer: plain-text presentation of the view models
"""

from givemeasong.view.document import DocumentMetadataSync, FaviconLink, HostDocument
from givemeasong.view.render import Renderer, TextRenderer, get_messages
from givemeasong.view.song_view import SearchView, SongView, View

__all__ = [
    "DocumentMetadataSync",
    "FaviconLink",
    "HostDocument",
    "Renderer",
    "TextRenderer",
    "get_messages",
    "SearchView",
    "SongView",
    "View",
]
