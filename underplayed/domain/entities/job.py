"""Playlist job state machine and status snapshot.

A job moves strictly forward through its stages:

    pending -> fetching_liked_songs -> fetching_listen_counts -> matching_tracks
    -> applying_shuffle -> creating_playlist -> adding_tracks -> completed

``failed`` is reachable from every non-terminal state. Two short-circuits end
a job early as ``completed``: an empty liked catalog (from
``fetching_liked_songs``) and an empty matched set (from ``matching_tracks``).
"""

from enum import StrEnum
import time
from typing import Any, Self

import attrs
from attrs import define, field

from underplayed.domain.errors import InvalidJobTransitionError


class JobState(StrEnum):
    """Lifecycle stages of a playlist job."""

    PENDING = "pending"
    FETCHING_LIKED_SONGS = "fetching_liked_songs"
    FETCHING_LISTEN_COUNTS = "fetching_listen_counts"
    MATCHING_TRACKS = "matching_tracks"
    APPLYING_SHUFFLE = "applying_shuffle"
    CREATING_PLAYLIST = "creating_playlist"
    ADDING_TRACKS = "adding_tracks"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (JobState.COMPLETED, JobState.FAILED)

    def can_transition_to(self, target: "JobState") -> bool:
        """Check whether a job in this state may move to ``target``.

        Re-entering the current state is allowed so a stage can publish
        progress updates.
        """
        if self.is_terminal:
            return False
        if target is JobState.FAILED or target is self:
            return True
        if target is JobState.COMPLETED and self in _SHORT_CIRCUIT_STATES:
            return True
        position = _FORWARD_SEQUENCE.index(self)
        return _FORWARD_SEQUENCE[position + 1] is target


_FORWARD_SEQUENCE: tuple[JobState, ...] = (
    JobState.PENDING,
    JobState.FETCHING_LIKED_SONGS,
    JobState.FETCHING_LISTEN_COUNTS,
    JobState.MATCHING_TRACKS,
    JobState.APPLYING_SHUFFLE,
    JobState.CREATING_PLAYLIST,
    JobState.ADDING_TRACKS,
    JobState.COMPLETED,
)

_SHORT_CIRCUIT_STATES = frozenset(
    {JobState.FETCHING_LIKED_SONGS, JobState.MATCHING_TRACKS}
)


def now_ms() -> int:
    """Current wall-clock time as integer milliseconds since the epoch."""
    return time.time_ns() // 1_000_000


@define(frozen=True, slots=True)
class JobSnapshot:
    """Full, self-contained status of one playlist job at one instant.

    Every transition produces a new snapshot that replaces the stored one
    wholesale; snapshots are never partially updated.
    """

    process_id: str
    state: JobState = field(converter=JobState)
    message: str = ""
    progress_percent: int | None = None
    playlist_url: str | None = None
    error: str | None = None
    updated_at_ms: int = field(factory=now_ms)
    details: dict[str, Any] = field(factory=dict)

    @classmethod
    def pending(cls, process_id: str, message: str) -> Self:
        return cls(
            process_id=process_id,
            state=JobState.PENDING,
            message=message,
            progress_percent=0,
        )

    @property
    def is_terminal(self) -> bool:
        return self.state.is_terminal

    def transition(self, state: JobState, message: str, **changes: Any) -> Self:
        """Create the snapshot for the next state.

        Args:
            state: Target state
            message: Human-readable description of what the job is doing now
            **changes: Other snapshot fields to replace; ``details`` is merged

        Raises:
            InvalidJobTransitionError: If the state machine forbids the move
        """
        if not self.state.can_transition_to(state):
            raise InvalidJobTransitionError(
                f"Job {self.process_id} cannot move from {self.state} to {state}"
            )

        details = {**self.details, **changes.pop("details", {})}
        return attrs.evolve(
            self,
            state=state,
            message=message,
            updated_at_ms=now_ms(),
            details=details,
            **changes,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-ready dictionary for storage and API responses."""
        return {
            "process_id": self.process_id,
            "state": self.state.value,
            "message": self.message,
            "progress_percent": self.progress_percent,
            "playlist_url": self.playlist_url,
            "error": self.error,
            "updated_at_ms": self.updated_at_ms,
            "details": dict(self.details),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        """Rebuild a snapshot from ``to_dict`` output.

        Raises:
            KeyError: If a required field is missing
            ValueError: If the state is unknown
        """
        return cls(
            process_id=data["process_id"],
            state=data["state"],
            message=data.get("message", ""),
            progress_percent=data.get("progress_percent"),
            playlist_url=data.get("playlist_url"),
            error=data.get("error"),
            updated_at_ms=int(data["updated_at_ms"]),
            details=dict(data.get("details") or {}),
        )
