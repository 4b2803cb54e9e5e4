"""Playlist creation and bounded batch population.

Tracks are appended in order, in consecutive batches of at most
``batch_size`` URIs. Once ``max_requests`` append calls have been made the
publisher stops even if URIs remain; the caller learns about it from the
returned ``PublishResult`` rather than an exception.
"""

from collections.abc import Awaitable, Callable, Sequence
from itertools import islice

from attrs import define, field, validators
from toolz import partition_all

from underplayed.config import get_logger
from underplayed.domain.entities import CreatedPlaylist, PublishResult
from underplayed.domain.errors import PlaylistPublishError
from underplayed.domain.repositories import PlaylistServiceProtocol

logger = get_logger(__name__)

# Called after each batch with (submitted_so_far, planned_total)
ProgressCallback = Callable[[int, int], Awaitable[None]]


@define(slots=True)
class PlaylistPublisher:
    """Creates playlists and fills them within a fixed request budget."""

    service: PlaylistServiceProtocol
    batch_size: int = field(default=100, validator=validators.ge(1))
    max_requests: int = field(default=100, validator=validators.ge(1))
    public: bool = False

    def planned_count(self, total: int) -> int:
        """How many of ``total`` URIs fit inside the request budget."""
        return min(total, self.batch_size * self.max_requests)

    async def create(self, name: str, description: str = "") -> CreatedPlaylist:
        """Create an empty playlist.

        Raises:
            PlaylistPublishError: If the service rejects the request
        """
        try:
            playlist = await self.service.create_playlist(
                name=name, description=description, public=self.public
            )
        except Exception as e:
            raise PlaylistPublishError(f"Failed to create playlist '{name}': {e}") from e

        logger.info(f"Created playlist '{name}' ({playlist.id})")
        return playlist

    async def publish(
        self,
        playlist_id: str,
        uris: Sequence[str],
        progress_callback: ProgressCallback | None = None,
    ) -> PublishResult:
        """Append ``uris`` to a playlist in order, within the request budget.

        Raises:
            PlaylistPublishError: If an append request fails; earlier batches
                stay on the playlist
        """
        planned = self.planned_count(len(uris))
        submitted = 0
        requests = 0

        for batch in islice(partition_all(self.batch_size, uris), self.max_requests):
            try:
                await self.service.add_tracks(playlist_id, list(batch))
            except Exception as e:
                raise PlaylistPublishError(
                    f"Failed to add tracks to playlist {playlist_id} after "
                    f"{submitted} of {planned}: {e}"
                ) from e

            submitted += len(batch)
            requests += 1
            logger.debug(f"Added batch of {len(batch)} tracks to playlist {playlist_id}")

            if progress_callback is not None:
                await progress_callback(submitted, planned)

        result = PublishResult(
            requested_count=len(uris),
            submitted_count=submitted,
            request_count=requests,
        )
        if result.truncated:
            logger.warning(
                f"Request limit of {self.max_requests} reached: added {submitted} "
                f"of {len(uris)} tracks to playlist {playlist_id}"
            )
        return result
