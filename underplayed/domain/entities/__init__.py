"""Core domain entities representing music and job concepts."""

# Job lifecycle entities
from .job import JobSnapshot, JobState, now_ms

# Playlist-related entities
from .playlist import CreatedPlaylist, PublishResult

# Track-related entities
from .track import ARTIST_SEPARATOR, Artist, MatchedTrack, PlayCountRecord, Track

__all__ = [
    # Track entities
    "ARTIST_SEPARATOR",
    "Artist",
    "MatchedTrack",
    "PlayCountRecord",
    "Track",
    # Playlist entities
    "CreatedPlaylist",
    "PublishResult",
    # Job entities
    "JobSnapshot",
    "JobState",
    "now_ms",
]
