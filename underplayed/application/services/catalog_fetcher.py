"""Complete liked-songs catalog retrieval.

The catalog must be complete for a job to proceed, so any page failure
aborts the fetch with ``CatalogFetchError``.
"""

from attrs import define

from underplayed.config import get_logger
from underplayed.domain.entities import Track
from underplayed.domain.errors import CatalogFetchError
from underplayed.domain.repositories import LikedTrackSourceProtocol

logger = get_logger(__name__)


@define(slots=True)
class LikedCatalogFetcher:
    """Follows liked-track cursors until the source reports no more pages."""

    source: LikedTrackSourceProtocol
    page_size: int = 50

    async def fetch_all(self) -> list[Track]:
        """Fetch every liked track in the order the source returns them.

        Raises:
            CatalogFetchError: If any page request fails
        """
        tracks: list[Track] = []
        cursor: str | None = None
        pages = 0

        while True:
            try:
                page, cursor = await self.source.get_liked_tracks(
                    limit=self.page_size, cursor=cursor
                )
            except Exception as e:
                raise CatalogFetchError(
                    f"Failed to fetch liked songs after {len(tracks)} tracks: {e}"
                ) from e

            tracks.extend(page)
            pages += 1
            logger.debug(f"Fetched liked songs page {pages}: {len(page)} tracks")

            if not cursor:
                break

        logger.info(f"Fetched {len(tracks)} liked songs in {pages} pages")
        return tracks
