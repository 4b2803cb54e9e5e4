"""Domain interfaces following Clean Architecture principles.

These interfaces define the contracts for storage and external services
without depending on infrastructure implementations.
"""

from .interfaces import (
    KeyValueStoreProtocol,
    LikedTrackSourceProtocol,
    ListenCountSourceProtocol,
    PlaylistServiceProtocol,
)

__all__ = [
    "KeyValueStoreProtocol",
    "LikedTrackSourceProtocol",
    "ListenCountSourceProtocol",
    "PlaylistServiceProtocol",
]
