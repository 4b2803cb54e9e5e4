"""Application use cases - orchestrate playlist jobs."""

from .generate_playlist import (
    FAILED_MESSAGE,
    INTERRUPTED_ERROR,
    NO_LIKED_SONGS_MESSAGE,
    NO_MATCHES_MESSAGE,
    PENDING_MESSAGE,
    GeneratePlaylistCommand,
    GeneratePlaylistUseCase,
    new_process_id,
    pending_snapshot,
    record_job_failure,
)

__all__ = [
    "FAILED_MESSAGE",
    "INTERRUPTED_ERROR",
    "NO_LIKED_SONGS_MESSAGE",
    "NO_MATCHES_MESSAGE",
    "PENDING_MESSAGE",
    "GeneratePlaylistCommand",
    "GeneratePlaylistUseCase",
    "new_process_id",
    "pending_snapshot",
    "record_job_failure",
]
