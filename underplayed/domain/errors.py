"""Typed failures raised by playlist job stages.

Any of these ends the job in the ``failed`` state; the orchestrator records
the message in the job's status snapshot.
"""


class PlaylistJobError(Exception):
    """Base class for failures that end a playlist job."""


class CatalogFetchError(PlaylistJobError):
    """The liked-songs catalog could not be fetched completely."""


class PlaylistPublishError(PlaylistJobError):
    """The playlist could not be created or populated."""


class InvalidJobTransitionError(PlaylistJobError, ValueError):
    """A job was asked to move to a state its current state cannot reach."""


class JobInterruptedError(PlaylistJobError):
    """A running job was cancelled before it reached a terminal state."""
