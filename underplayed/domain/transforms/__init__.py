"""Pure transformations that turn matched tracks into playlist orderings."""

from .shuffle import (
    cumulative_shuffle,
    expected_shuffle_length,
    fisher_yates_shuffle,
    iter_shuffle_blocks,
)

__all__ = [
    "cumulative_shuffle",
    "expected_shuffle_length",
    "fisher_yates_shuffle",
    "iter_shuffle_blocks",
]
