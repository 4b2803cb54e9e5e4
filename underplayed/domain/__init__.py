"""Underplayed domain layer - pure business logic with no infrastructure dependencies."""

from . import entities, matching, transforms

# Re-export key types for convenience
from .entities import (
    Artist,
    CreatedPlaylist,
    JobSnapshot,
    JobState,
    MatchedTrack,
    PlayCountRecord,
    PublishResult,
    Track,
)
from .errors import (
    CatalogFetchError,
    InvalidJobTransitionError,
    JobInterruptedError,
    PlaylistJobError,
    PlaylistPublishError,
)
from .matching import make_match_key, match_tracks
from .transforms import cumulative_shuffle, expected_shuffle_length

__all__ = [
    # Modules
    "entities",
    "matching",
    "transforms",
    # Key domain types
    "Artist",
    "CreatedPlaylist",
    "JobSnapshot",
    "JobState",
    "MatchedTrack",
    "PlayCountRecord",
    "PublishResult",
    "Track",
    # Errors
    "CatalogFetchError",
    "InvalidJobTransitionError",
    "JobInterruptedError",
    "PlaylistJobError",
    "PlaylistPublishError",
    # Algorithms
    "cumulative_shuffle",
    "expected_shuffle_length",
    "make_match_key",
    "match_tracks",
]
