"""Track-related domain entities.

Pure track representations and related value objects with zero external dependencies.
"""

from attrs import define, field, validators

ARTIST_SEPARATOR = ", "


@define(frozen=True, slots=True)
class Artist:
    """Artist representation with normalized metadata."""

    name: str = field(validator=validators.instance_of(str))


@define(frozen=True, slots=True)
class Track:
    """Immutable liked track as fetched from the catalog service.

    Owned by a single playlist job for the duration of one run and never
    persisted beyond it.
    """

    id: str = field(validator=validators.instance_of(str))
    title: str = field(validator=validators.instance_of(str))
    artists: list[Artist] = field(
        factory=list,
        validator=validators.deep_iterable(
            member_validator=validators.instance_of(Artist),
        ),
    )
    uri: str = field(default="", validator=validators.instance_of(str))

    @property
    def artist_names(self) -> list[str]:
        return [artist.name for artist in self.artists]

    def joined_artist_names(self, separator: str = ARTIST_SEPARATOR) -> str:
        """All artist names in their given order, joined for display or matching."""
        return separator.join(self.artist_names)


@define(frozen=True, slots=True)
class PlayCountRecord:
    """How many times the user has played a track, per the listen-count service."""

    artist: str = field(validator=validators.instance_of(str))
    title: str = field(validator=validators.instance_of(str))
    count: int = field(validator=[validators.instance_of(int), validators.ge(0)])


@define(frozen=True, slots=True)
class MatchedTrack:
    """A liked track whose play count is known.

    Only created when the matcher finds a play count; tracks without one are
    dropped rather than assumed unplayed.
    """

    track: Track
    play_count: int = field(validator=[validators.instance_of(int), validators.ge(0)])

    @property
    def uri(self) -> str:
        return self.track.uri
