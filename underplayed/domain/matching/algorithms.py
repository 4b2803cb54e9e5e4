"""Pure algorithms for joining liked tracks with play counts.

Both datasets are keyed the same way: the artist string and the title are
each lower-cased and stripped, then concatenated with a fixed separator. A
liked track's artist string is all of its artist names, in order, joined
with ``", "``.
"""

from collections.abc import Iterable

from underplayed.domain.entities import (
    ARTIST_SEPARATOR,
    MatchedTrack,
    PlayCountRecord,
    Track,
)

from .types import MatchKey

KEY_SEPARATOR = " - "


def normalize_key_part(value: str) -> str:
    """Lower-case and trim one component of a match key."""
    return value.strip().lower()


def make_match_key(artist: str, title: str) -> MatchKey:
    """Build the join key for an (artist, title) pair."""
    return f"{normalize_key_part(artist)}{KEY_SEPARATOR}{normalize_key_part(title)}"


def track_match_key(track: Track) -> MatchKey:
    """Build the join key for a liked track from all of its artists."""
    return make_match_key(track.joined_artist_names(ARTIST_SEPARATOR), track.title)


def build_play_count_index(records: Iterable[PlayCountRecord]) -> dict[MatchKey, int]:
    """Map each record's key to its play count.

    When two records normalize to the same key the later one wins.
    """
    return {make_match_key(record.artist, record.title): record.count for record in records}


def match_tracks(
    tracks: Iterable[Track],
    records: Iterable[PlayCountRecord],
) -> list[MatchedTrack]:
    """Attach play counts to liked tracks.

    Tracks without a play count are dropped. The surviving tracks keep the
    relative order they had in ``tracks``.
    """
    play_counts = build_play_count_index(records)

    matched = []
    for track in tracks:
        play_count = play_counts.get(track_match_key(track))
        if play_count is not None:
            matched.append(MatchedTrack(track=track, play_count=play_count))
    return matched
