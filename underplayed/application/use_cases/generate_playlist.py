"""GeneratePlaylist use case: the background playlist job.

Drives one job through fetch -> match -> shuffle -> publish, writing a status
snapshot as each stage begins so a poller always sees what is in progress.

Failure policy:
- Any exception ends the job with a single ``failed`` snapshot carrying the
  exception's message. Nothing is retried and nothing already done on the
  remote service is undone.
- An empty liked catalog or an empty matched set ends the job as
  ``completed`` with an explanation and no playlist.
- Running out of the publish request budget is still ``completed``; the
  message notes the reduced track count.
"""

import asyncio
from datetime import datetime
import random
from typing import Any
from uuid import uuid4

from attrs import define, field

from underplayed.application.services.catalog_fetcher import LikedCatalogFetcher
from underplayed.application.services.job_status import JobStatusRepository
from underplayed.application.services.listen_count_fetcher import ListenCountFetcher
from underplayed.application.services.playlist_publisher import PlaylistPublisher
from underplayed.config import get_logger
from underplayed.domain.entities import JobSnapshot, JobState
from underplayed.domain.errors import JobInterruptedError
from underplayed.domain.matching import MatchSummary, match_tracks
from underplayed.domain.transforms import cumulative_shuffle

logger = get_logger(__name__)

PENDING_MESSAGE = "Playlist generation process initiated."
FAILED_MESSAGE = "Playlist generation failed."
INTERRUPTED_ERROR = "Interrupted by shutdown before the job finished."
NO_LIKED_SONGS_MESSAGE = "No liked songs found in your Spotify library."
NO_MATCHES_MESSAGE = "No tracks with recorded play counts were found."

# Progress reported on entering each stage; adding_tracks climbs toward 99
STAGE_PROGRESS: dict[JobState, int] = {
    JobState.PENDING: 0,
    JobState.FETCHING_LIKED_SONGS: 5,
    JobState.FETCHING_LISTEN_COUNTS: 20,
    JobState.MATCHING_TRACKS: 45,
    JobState.APPLYING_SHUFFLE: 55,
    JobState.CREATING_PLAYLIST: 65,
    JobState.ADDING_TRACKS: 70,
    JobState.COMPLETED: 100,
}


def new_process_id() -> str:
    """Opaque, unique identifier for a playlist job."""
    return uuid4().hex


def pending_snapshot(process_id: str) -> JobSnapshot:
    """The snapshot written when a job is accepted, before it starts running."""
    return JobSnapshot.pending(process_id, PENDING_MESSAGE)


async def record_job_failure(
    repository: JobStatusRepository, snapshot: JobSnapshot, error: BaseException
) -> JobSnapshot:
    """Write the terminal ``failed`` snapshot that follows ``snapshot``.

    A failure to write is logged, not raised; the failed snapshot is returned
    either way. A job that already finished keeps its terminal snapshot.
    """
    if snapshot.is_terminal:
        logger.warning(
            f"Job {snapshot.process_id} already {snapshot.state}; "
            f"not recording error: {error}"
        )
        return snapshot

    failed = snapshot.transition(
        JobState.FAILED,
        FAILED_MESSAGE,
        error=str(error) or type(error).__name__,
        details={"failed_during": str(snapshot.state)},
    )
    try:
        await repository.save(failed)
    except Exception:
        logger.exception(f"Could not record failure for job {failed.process_id}")
    return failed


@define(frozen=True, slots=True)
class GeneratePlaylistCommand:
    """Command for running one playlist job."""

    process_id: str
    playlist_name: str | None = None


@define(slots=True)
class _JobProgress:
    """Current snapshot of a running job plus its persistence."""

    snapshot: JobSnapshot
    repository: JobStatusRepository

    async def advance(self, state: JobState, message: str, **changes: Any) -> None:
        """Persist the next snapshot; it becomes current only once written."""
        changes.setdefault("progress_percent", STAGE_PROGRESS.get(state))
        next_snapshot = self.snapshot.transition(state, message, **changes)
        await self.repository.save(next_snapshot)
        self.snapshot = next_snapshot

        # Per-batch updates inside adding_tracks go to debug
        is_batch_update = state is JobState.ADDING_TRACKS and "details" not in changes
        bound = logger.bind(state=str(state))
        log = bound.debug if is_batch_update else bound.info
        log(f"Job {next_snapshot.process_id} -> {state}: {message}")

    async def fail(self, error: BaseException) -> None:
        self.snapshot = await record_job_failure(self.repository, self.snapshot, error)


@define(slots=True)
class GeneratePlaylistUseCase:
    """Runs the full playlist pipeline for one job.

    Collaborators are injected fully configured; the use case never reads
    global settings.
    """

    catalog_fetcher: LikedCatalogFetcher
    listen_count_fetcher: ListenCountFetcher
    publisher: PlaylistPublisher
    status_repository: JobStatusRepository
    playlist_name_prefix: str = "Shuffled Liked Songs (Cumulative Plays)"
    playlist_description: str = ""
    rng: random.Random | None = field(default=None, repr=False)

    def playlist_name(self, when: datetime | None = None) -> str:
        stamp = (when or datetime.now()).strftime("%Y-%m-%d %H:%M")
        return f"{self.playlist_name_prefix} - {stamp}"

    async def execute(self, command: GeneratePlaylistCommand) -> JobSnapshot:
        """Run the job to a terminal state and return its final snapshot.

        Never raises: every failure is recorded in the job's snapshot. Cancellation
        records an interrupted failure and then propagates.
        """
        progress = _JobProgress(
            snapshot=pending_snapshot(command.process_id),
            repository=self.status_repository,
        )

        with logger.contextualize(process_id=command.process_id):
            try:
                await self._run_stages(command, progress)
            except Exception as e:
                logger.opt(exception=e).error(
                    f"Playlist generation failed for process {command.process_id}: {e}"
                )
                await progress.fail(e)
            except asyncio.CancelledError:
                logger.warning(f"Playlist job {command.process_id} interrupted")
                await progress.fail(JobInterruptedError(INTERRUPTED_ERROR))
                raise

        return progress.snapshot

    async def _run_stages(
        self, command: GeneratePlaylistCommand, progress: _JobProgress
    ) -> None:
        # --- Liked catalog ---------------------------------------------------
        await progress.advance(
            JobState.FETCHING_LIKED_SONGS, "Fetching liked songs from Spotify..."
        )
        liked_tracks = await self.catalog_fetcher.fetch_all()
        if not liked_tracks:
            await progress.advance(
                JobState.COMPLETED, NO_LIKED_SONGS_MESSAGE, details={"liked_count": 0}
            )
            return

        # --- Play counts -----------------------------------------------------
        await progress.advance(
            JobState.FETCHING_LISTEN_COUNTS,
            f"Fetching Last.fm play counts for {len(liked_tracks)} tracks...",
            details={"liked_count": len(liked_tracks)},
        )
        records = await self.listen_count_fetcher.fetch_all()

        # --- Matching --------------------------------------------------------
        await progress.advance(
            JobState.MATCHING_TRACKS,
            f"Matching {len(liked_tracks)} liked songs against "
            f"{len(records)} play counts...",
            details={"play_count_records": len(records)},
        )
        matched = match_tracks(liked_tracks, records)
        summary = MatchSummary(
            liked_count=len(liked_tracks),
            record_count=len(records),
            matched_count=len(matched),
        )
        if not matched:
            await progress.advance(
                JobState.COMPLETED, NO_MATCHES_MESSAGE, details=summary.as_dict()
            )
            return

        # --- Shuffle ---------------------------------------------------------
        await progress.advance(
            JobState.APPLYING_SHUFFLE,
            f"Applying cumulative shuffle logic to {len(matched)} tracks...",
            details=summary.as_dict(),
        )
        uris = [entry.uri for entry in cumulative_shuffle(matched, self.rng)]

        # --- Publish ---------------------------------------------------------
        name = command.playlist_name or self.playlist_name()
        await progress.advance(
            JobState.CREATING_PLAYLIST,
            "Creating new Spotify playlist...",
            details={"shuffled_count": len(uris), "playlist_name": name},
        )
        playlist = await self.publisher.create(name, self.playlist_description)

        planned = self.publisher.planned_count(len(uris))
        await progress.advance(
            JobState.ADDING_TRACKS,
            f"Adding {planned} tracks to playlist...",
            playlist_url=playlist.url,
            details={"playlist_id": playlist.id},
        )

        async def report_batch(submitted: int, total: int) -> None:
            span = 99 - STAGE_PROGRESS[JobState.ADDING_TRACKS]
            await progress.advance(
                JobState.ADDING_TRACKS,
                f"Added {submitted} of {total} tracks to playlist...",
                progress_percent=STAGE_PROGRESS[JobState.ADDING_TRACKS]
                + (span * submitted) // max(total, 1),
            )

        result = await self.publisher.publish(
            playlist.id, uris, progress_callback=report_batch
        )

        if result.truncated:
            message = (
                f"Created playlist {name} with a reduced track count: added "
                f"{result.submitted_count} of {result.requested_count} tracks "
                f"before reaching the limit of {result.request_count} requests."
            )
        else:
            message = f"Successfully created and populated playlist: {name}"

        await progress.advance(
            JobState.COMPLETED,
            message,
            details={
                "submitted_count": result.submitted_count,
                "truncated": result.truncated,
            },
        )
