"""Track matching algorithms and types for joining liked songs with play counts."""

from .algorithms import (
    KEY_SEPARATOR,
    build_play_count_index,
    make_match_key,
    match_tracks,
    normalize_key_part,
    track_match_key,
)
from .types import MatchKey, MatchSummary

__all__ = [
    "KEY_SEPARATOR",
    "MatchKey",
    "MatchSummary",
    "build_play_count_index",
    "make_match_key",
    "match_tracks",
    "normalize_key_part",
    "track_match_key",
]
