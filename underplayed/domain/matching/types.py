"""Pure domain types for track matching."""

from typing import TypeAlias

from attrs import define

# Normalized "artist - title" join key; never shown to users
MatchKey: TypeAlias = str


@define(frozen=True, slots=True)
class MatchSummary:
    """Counts describing how much of the liked catalog found a play count."""

    liked_count: int
    record_count: int
    matched_count: int

    @property
    def dropped_count(self) -> int:
        return self.liked_count - self.matched_count

    def as_dict(self) -> dict[str, int]:
        """Convert to dictionary for job status details."""
        return {
            "liked_count": self.liked_count,
            "play_count_records": self.record_count,
            "matched_count": self.matched_count,
            "unmatched_count": self.dropped_count,
        }
