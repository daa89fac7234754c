"""
Music Catalog Interface

Port interface for the external music service that owns search, track
metadata and the shared playback queue.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ...domain.music.entities import LiveQueue, Track


class MusicCatalog(ABC):
    """Abstract interface for the music service.

    Implementations may raise any exception on transport failure; callers in
    the application layer wrap those into ``UpstreamFailureError``.
    """

    @abstractmethod
    async def search_tracks(self, query: str, limit: int = 10) -> list[Track]:
        """Search the catalog.

        Args:
            query: Free-text search.
            limit: Maximum number of results.

        Returns:
            Matching tracks, best match first.
        """
        ...

    @abstractmethod
    async def get_track(self, track_id: str) -> Track:
        """Fetch full metadata for one track."""
        ...

    @abstractmethod
    def parse_track_reference(self, reference: str) -> str | None:
        """Extract a track id from a share URL or URI.

        Returns:
            The track id, or None if the reference is not recognized.
        """
        ...

    @abstractmethod
    async def enqueue(self, track_uri: str) -> None:
        """Append a track to the shared playback queue."""
        ...

    @abstractmethod
    async def read_live_queue(self) -> LiveQueue:
        """Read the currently playing track and the upcoming queue."""
        ...
