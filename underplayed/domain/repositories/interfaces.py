"""Domain interfaces for the services a playlist job depends on.

These protocols define the contracts for storage and the two external music
services without depending on infrastructure implementations.
"""

from collections.abc import AsyncIterator
from typing import Protocol, runtime_checkable

from underplayed.domain.entities import CreatedPlaylist, PlayCountRecord, Track


@runtime_checkable
class KeyValueStoreProtocol(Protocol):
    """Durable key -> value mapping with optional per-key expiry."""

    async def get(self, key: str) -> str | None:
        """Return the stored value, or None if absent or expired."""
        ...

    async def put(self, key: str, value: str, ttl_seconds: int | None = None) -> None:
        """Store ``value`` under ``key``, replacing any previous value.

        Args:
            key: Entry key
            value: Serialized value
            ttl_seconds: Seconds until the entry may be evicted; None keeps it
        """
        ...

    async def delete(self, key: str) -> None:
        """Remove ``key`` if present."""
        ...


class LikedTrackSourceProtocol(Protocol):
    """Cursor-paginated access to a user's liked tracks."""

    async def get_liked_tracks(
        self, limit: int = 50, cursor: str | None = None
    ) -> tuple[list[Track], str | None]:
        """Fetch one page of liked tracks.

        Returns:
            Tuple of (tracks on this page, cursor for the next page or None)
        """
        ...


class ListenCountSourceProtocol(Protocol):
    """Page-by-page access to a user's top-played tracks with counts."""

    def iter_top_track_pages(
        self, page_size: int = 50
    ) -> AsyncIterator[list[PlayCountRecord]]:
        """Yield one list of records per remote page until none remain.

        Each page is requested only when the iterator is advanced.
        """
        ...


class PlaylistServiceProtocol(Protocol):
    """Playlist creation and population on the catalog service."""

    async def create_playlist(
        self, name: str, description: str = "", public: bool = False
    ) -> CreatedPlaylist:
        """Create an empty playlist for the current user."""
        ...

    async def add_tracks(self, playlist_id: str, uris: list[str]) -> None:
        """Append one batch of track URIs to the end of a playlist."""
        ...
