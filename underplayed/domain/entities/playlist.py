"""Playlist-related domain entities."""

from attrs import define


@define(frozen=True, slots=True)
class CreatedPlaylist:
    """A playlist that now exists on the remote service."""

    id: str
    name: str
    url: str | None = None


@define(frozen=True, slots=True)
class PublishResult:
    """Outcome of appending an ordered track sequence to a playlist."""

    requested_count: int
    submitted_count: int
    request_count: int

    @property
    def truncated(self) -> bool:
        """True when the request budget ran out before every track was sent."""
        return self.submitted_count < self.requested_count

    @property
    def dropped_count(self) -> int:
        return self.requested_count - self.submitted_count
