"""Last.fm API integration for per-track play counts.

This module provides a clean interface to the Last.fm API through the pylast
library (https://github.com/pylast/pylast), converting Last.fm top-track
entries into domain play-count records.

Key components:
- LastFMConnector: Read-only client for a user's top tracks
- convert_top_item: Transform a pylast TopItem into a PlayCountRecord

pylast pages through ``user.getTopTracks`` lazily when streaming; the
connector pulls ``page_size`` entries at a time in a worker thread, so each
yielded page costs at most one Last.fm request.
"""

import asyncio
from collections.abc import AsyncIterator, Iterator
from itertools import islice
from typing import Any, ClassVar

from attrs import define, field
import pylast

from underplayed.config import get_logger, resilient_operation
from underplayed.domain.entities import PlayCountRecord

# Get contextual logger with service binding
logger = get_logger(__name__).bind(service="lastfm")


@define(slots=True)
class LastFMConnector:
    """Last.fm API connector with domain model conversion."""

    api_key: str = ""
    api_secret: str = ""
    lastfm_username: str = ""
    client: pylast.LastFMNetwork | None = field(default=None, repr=False)

    # Constants for API communication
    USER_AGENT: ClassVar[str] = "Underplayed/0.1.0 (Play Count Shuffle)"

    def __attrs_post_init__(self) -> None:
        """Initialize a read-only Last.fm client with API credentials."""
        if self.client is not None or not self.api_key:
            return

        self.client = pylast.LastFMNetwork(
            api_key=self.api_key,
            api_secret=self.api_secret,
        )

        # Set user agent for API courtesy
        pylast.HEADERS["User-Agent"] = self.USER_AGENT

    def _require_user(self) -> pylast.User:
        if not self.client:
            raise ValueError("Last.fm client not initialized (missing API key)")
        if not self.lastfm_username:
            raise ValueError("No Last.fm username configured")
        return self.client.get_user(self.lastfm_username)

    async def iter_top_track_pages(
        self, page_size: int = 50
    ) -> AsyncIterator[list[PlayCountRecord]]:
        """Yield the user's all-time top tracks one page at a time.

        Args:
            page_size: Records per yielded page

        Yields:
            Lists of PlayCountRecord, in Last.fm's ranking order
        """
        user = self._require_user()
        top_items: Iterator[Any] = iter(
            user.get_top_tracks(
                period=pylast.PERIOD_OVERALL, limit=None, cacheable=False, stream=True
            )
        )

        page_number = 0
        while True:
            page_number += 1
            items = await self._next_page(top_items, page_size, page_number)
            if not items:
                return

            records = [
                record for item in items if (record := convert_top_item(item))
            ]
            yield records

            if len(items) < page_size:
                return

    @resilient_operation("lastfm_top_tracks_page")
    async def _next_page(
        self, top_items: Iterator[Any], page_size: int, page_number: int
    ) -> list[Any]:
        logger.debug(f"Fetching Last.fm top tracks page {page_number}")
        return await asyncio.to_thread(lambda: list(islice(top_items, page_size)))


def convert_top_item(top_item: Any) -> PlayCountRecord | None:
    """Convert a pylast TopItem (track, weight) to a PlayCountRecord.

    Returns None for entries without an artist or title.
    """
    track = top_item.item
    artist = track.get_artist() if hasattr(track, "get_artist") else None
    artist_name = artist.get_name() if artist else ""
    title = track.get_title() if hasattr(track, "get_title") else str(track)

    if not artist_name or not title:
        logger.debug(f"Skipping Last.fm entry without artist or title: {track}")
        return None

    try:
        count = max(int(top_item.weight or 0), 0)
    except (TypeError, ValueError):
        count = 0

    return PlayCountRecord(artist=artist_name, title=title, count=count)
