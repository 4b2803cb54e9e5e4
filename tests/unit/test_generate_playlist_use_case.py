"""Tests for the playlist job orchestrator."""

import asyncio
from collections import Counter
from datetime import datetime
from unittest.mock import AsyncMock, patch

import pytest

from underplayed.application.services import (
    JobStatusRepository,
    LikedCatalogFetcher,
    ListenCountFetcher,
    PlaylistPublisher,
)
from underplayed.application.use_cases import (
    FAILED_MESSAGE,
    INTERRUPTED_ERROR,
    NO_LIKED_SONGS_MESSAGE,
    NO_MATCHES_MESSAGE,
    GeneratePlaylistCommand,
    GeneratePlaylistUseCase,
    record_job_failure,
)
from underplayed.domain.entities import JobSnapshot, JobState

from tests.fixtures.fakes import (
    FakeLikedSource,
    FakeListenSource,
    FakePlaylistService,
    RecordingStore,
)

FULL_RUN = [
    "fetching_liked_songs",
    "fetching_listen_counts",
    "matching_tracks",
    "applying_shuffle",
    "creating_playlist",
    "adding_tracks",
]


@pytest.fixture
def build_use_case(
    liked_source, listen_source, playlist_service, status_repository, seeded_rng
):
    """Factory for a use case wired to fakes; keyword overrides replace parts."""

    def _build(
        liked=None,
        listen=None,
        service=None,
        repository=None,
        batch_size=100,
        max_requests=100,
    ):
        return GeneratePlaylistUseCase(
            catalog_fetcher=LikedCatalogFetcher(source=liked or liked_source),
            listen_count_fetcher=ListenCountFetcher(
                source=listen or listen_source, request_delay=0
            ),
            publisher=PlaylistPublisher(
                service=service or playlist_service,
                batch_size=batch_size,
                max_requests=max_requests,
            ),
            status_repository=repository or status_repository,
            playlist_name_prefix="Test Mix",
            playlist_description="generated in tests",
            rng=seeded_rng,
        )

    return _build


class TestHappyPath:
    """A full run through every stage."""

    async def test_states_are_written_in_order(self, build_use_case, recording_store):
        snapshot = await build_use_case().execute(GeneratePlaylistCommand("p1"))

        assert snapshot.state is JobState.COMPLETED
        states = recording_store.states
        distinct = [s for i, s in enumerate(states) if s not in states[:i]]
        assert distinct == [*FULL_RUN, "completed"]

    async def test_playlist_contains_cumulative_shuffle(
        self, build_use_case, playlist_service
    ):
        await build_use_case().execute(GeneratePlaylistCommand("p1"))

        # b has 0 plays and c has 1: b twice, c once, a dropped
        assert Counter(playlist_service.submitted) == {
            "spotify:track:b": 2,
            "spotify:track:c": 1,
        }
        assert playlist_service.submitted[0] == "spotify:track:b"

    async def test_completed_snapshot_reports_playlist(
        self, build_use_case, recording_store
    ):
        snapshot = await build_use_case().execute(
            GeneratePlaylistCommand("p1", playlist_name="My Mix")
        )

        assert snapshot.message == "Successfully created and populated playlist: My Mix"
        assert snapshot.playlist_url == "https://open.spotify.com/playlist/pl-1"
        assert snapshot.progress_percent == 100
        assert snapshot.details["matched_count"] == 2
        assert snapshot.details["unmatched_count"] == 1
        assert snapshot.details["submitted_count"] == 3
        assert snapshot.details["truncated"] is False
        assert recording_store.writes[-1][2] == 3600

    async def test_progress_never_decreases(self, build_use_case, recording_store):
        await build_use_case().execute(GeneratePlaylistCommand("p1"))

        progress = [s["progress_percent"] for _, s, _ in recording_store.writes]
        assert progress == sorted(progress)

    async def test_only_terminal_snapshot_expires(self, build_use_case, recording_store):
        await build_use_case().execute(GeneratePlaylistCommand("p1"))

        ttls = [ttl for _, _, ttl in recording_store.writes]
        assert ttls[:-1] == [None] * (len(ttls) - 1)
        assert ttls[-1] == 3600

    async def test_default_name_uses_prefix_and_local_time(
        self, build_use_case, playlist_service
    ):
        use_case = build_use_case()

        assert (
            use_case.playlist_name(datetime(2024, 3, 9, 7, 5)) == "Test Mix - 2024-03-09 07:05"
        )

        await use_case.execute(GeneratePlaylistCommand("p1"))
        assert playlist_service.created[0]["name"].startswith("Test Mix - ")
        assert playlist_service.created[0]["description"] == "generated in tests"


    async def test_playlist_name_with_braces_is_used_verbatim(
        self, build_use_case, recording_store, playlist_service
    ):
        snapshot = await build_use_case().execute(
            GeneratePlaylistCommand("p1", playlist_name="Mix {night} {0}")
        )

        assert snapshot.state is JobState.COMPLETED
        assert snapshot.message.endswith("Mix {night} {0}")
        assert recording_store.states[-1] == "completed"
        assert "failed" not in recording_store.states
        assert playlist_service.created[0]["name"] == "Mix {night} {0}"


class TestShortCircuits:
    async def test_empty_catalog_completes_without_playlist(
        self, build_use_case, recording_store, playlist_service
    ):
        snapshot = await build_use_case(liked=FakeLikedSource([])).execute(
            GeneratePlaylistCommand("p1")
        )

        assert snapshot.state is JobState.COMPLETED
        assert snapshot.message == NO_LIKED_SONGS_MESSAGE
        assert recording_store.states == ["fetching_liked_songs", "completed"]
        assert playlist_service.created == []

    async def test_no_matches_completes_without_playlist(
        self, build_use_case, recording_store, playlist_service
    ):
        """Scenario: liked [A, B], no listen counts at all."""
        snapshot = await build_use_case(listen=FakeListenSource([])).execute(
            GeneratePlaylistCommand("p1")
        )

        assert snapshot.state is JobState.COMPLETED
        assert snapshot.message == NO_MATCHES_MESSAGE
        assert snapshot.playlist_url is None
        assert recording_store.states == [
            "fetching_liked_songs",
            "fetching_listen_counts",
            "matching_tracks",
            "completed",
        ]
        assert playlist_service.created == []

    async def test_listen_count_failure_is_not_fatal(
        self, build_use_case, play_counts
    ):
        """A failing Last.fm page keeps earlier pages and the job carries on."""
        listen = FakeListenSource([play_counts, []], fail_at_page=1)

        snapshot = await build_use_case(listen=listen).execute(GeneratePlaylistCommand("p1"))

        assert snapshot.state is JobState.COMPLETED
        assert snapshot.details["play_count_records"] == 2


class TestTruncation:
    async def test_budget_exhaustion_completes_with_reduced_count(
        self, build_use_case, playlist_service
    ):
        snapshot = await build_use_case(batch_size=1, max_requests=2).execute(
            GeneratePlaylistCommand("p1")
        )

        assert snapshot.state is JobState.COMPLETED
        assert "reduced track count" in snapshot.message
        assert "added 2 of 3 tracks" in snapshot.message
        assert snapshot.details["truncated"] is True
        assert len(playlist_service.submitted) == 2


class TestFailures:
    """Any stage failure ends the job with one failed snapshot."""

    async def test_catalog_failure(self, build_use_case, recording_store, liked_tracks):
        snapshot = await build_use_case(
            liked=FakeLikedSource(liked_tracks, fail_on_call=1)
        ).execute(GeneratePlaylistCommand("p1"))

        assert snapshot.state is JobState.FAILED
        assert snapshot.message == FAILED_MESSAGE
        assert "Spotify is unavailable" in snapshot.error
        assert snapshot.details["failed_during"] == "fetching_liked_songs"
        assert recording_store.states == ["fetching_liked_songs", "failed"]
        assert recording_store.writes[-1][2] == 3600

    async def test_create_failure(self, build_use_case, recording_store):
        snapshot = await build_use_case(
            service=FakePlaylistService(fail_create=True)
        ).execute(GeneratePlaylistCommand("p1"))

        assert snapshot.state is JobState.FAILED
        assert "Playlist creation rejected" in snapshot.error
        assert recording_store.states[-2:] == ["creating_playlist", "failed"]

    async def test_append_failure_keeps_created_playlist(self, build_use_case):
        service = FakePlaylistService(fail_on_batch=1)

        snapshot = await build_use_case(service=service).execute(
            GeneratePlaylistCommand("p1")
        )

        assert snapshot.state is JobState.FAILED
        assert snapshot.playlist_url == "https://open.spotify.com/playlist/pl-1"
        assert len(service.created) == 1

    async def test_unexpected_error_is_captured(self, build_use_case, recording_store):
        with patch(
            "underplayed.application.use_cases.generate_playlist.cumulative_shuffle",
            side_effect=RuntimeError("unexpected"),
        ):
            snapshot = await build_use_case().execute(GeneratePlaylistCommand("p1"))

        assert snapshot.state is JobState.FAILED
        assert snapshot.error == "unexpected"
        assert recording_store.states[-2:] == ["applying_shuffle", "failed"]

    async def test_status_store_outage_does_not_raise(self, build_use_case):
        """When even the failed snapshot cannot be written, execute still returns."""
        store = RecordingStore(fail_on_put=2)
        repository = JobStatusRepository(store=store)

        snapshot = await build_use_case(repository=repository).execute(
            GeneratePlaylistCommand("p1")
        )

        assert snapshot.state is JobState.FAILED
        assert snapshot.error == "status store unavailable"
        assert store.states == ["fetching_liked_songs"]

    async def test_failed_snapshot_follows_last_written_state(self, build_use_case):
        repository = AsyncMock(spec=JobStatusRepository)
        repository.save.side_effect = [None, RuntimeError("disk full"), None]

        snapshot = await build_use_case(repository=repository).execute(
            GeneratePlaylistCommand("p1")
        )

        assert snapshot.state is JobState.FAILED
        assert snapshot.details["failed_during"] == "fetching_liked_songs"
        saved = [call.args[0].state for call in repository.save.await_args_list]
        assert saved == [
            JobState.FETCHING_LIKED_SONGS,
            JobState.FETCHING_LISTEN_COUNTS,
            JobState.FAILED,
        ]

    async def test_error_after_completion_keeps_terminal_snapshot(self):
        repository = AsyncMock(spec=JobStatusRepository)
        fetching = JobSnapshot.pending("p1", "started").transition(
            JobState.FETCHING_LIKED_SONGS, "fetching"
        )
        completed = fetching.transition(JobState.COMPLETED, "done")

        snapshot = await record_job_failure(
            repository, completed, RuntimeError("late error")
        )

        assert snapshot is completed
        repository.save.assert_not_awaited()


class BlockingLikedSource:
    """Liked-track source that never answers."""

    async def get_liked_tracks(self, limit=50, cursor=None):
        await asyncio.Event().wait()


class TestCancellation:
    async def test_cancelled_job_records_interrupted_failure(
        self, build_use_case, recording_store
    ):
        use_case = build_use_case(liked=BlockingLikedSource())
        task = asyncio.create_task(use_case.execute(GeneratePlaylistCommand("p1")))
        while not recording_store.states:
            await asyncio.sleep(0)

        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert recording_store.states == ["fetching_liked_songs", "failed"]
        _, failed, ttl = recording_store.writes[-1]
        assert failed["error"] == INTERRUPTED_ERROR
        assert failed["details"]["failed_during"] == "fetching_liked_songs"
        assert ttl == 3600
