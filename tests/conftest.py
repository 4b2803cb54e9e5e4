"""Shared fixtures for the Underplayed test suite."""

import os
import random

import pytest

# Keep tests off the on-disk status database
os.environ.setdefault("DATABASE__URL", "memory")

from underplayed.application.services import JobStatusRepository  # noqa: E402
from underplayed.config import load_settings  # noqa: E402
from underplayed.domain.entities import PlayCountRecord  # noqa: E402

from tests.fixtures.fakes import (  # noqa: E402
    FakeLikedSource,
    FakeListenSource,
    FakePlaylistService,
    RecordingStore,
    make_track,
)


@pytest.fixture
def test_settings(tmp_path):
    """Settings with an in-memory store and no Last.fm request delay."""
    return load_settings(
        database={"url": "memory"},
        api={"lastfm_request_delay": 0.0},
        data_dir=tmp_path / "data",
    )


@pytest.fixture
def seeded_rng():
    return random.Random(1234)


@pytest.fixture
def liked_tracks():
    """Three liked tracks, one of them with two artists."""
    return [
        make_track("a", "Alpha", "Artist One"),
        make_track("b", "Bravo", "Artist Two", "Guest"),
        make_track("c", "Charlie", "Artist Three"),
    ]


@pytest.fixture
def play_counts():
    """Counts for two of the three liked tracks, in Last.fm's spelling."""
    return [
        PlayCountRecord(artist="artist two, guest", title="BRAVO", count=0),
        PlayCountRecord(artist="Artist Three ", title="Charlie", count=1),
    ]


@pytest.fixture
def recording_store():
    return RecordingStore()


@pytest.fixture
def status_repository(recording_store):
    return JobStatusRepository(store=recording_store)


@pytest.fixture
def liked_source(liked_tracks):
    return FakeLikedSource(liked_tracks)


@pytest.fixture
def listen_source(play_counts):
    return FakeListenSource([play_counts])


@pytest.fixture
def playlist_service():
    return FakePlaylistService()
