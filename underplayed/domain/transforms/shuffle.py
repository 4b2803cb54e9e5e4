"""Cumulative play-count shuffle.

Walks play-count levels from 0 up to the highest count. At each level the
tracks played exactly that many times join a pool that only ever grows, and
a freshly shuffled copy of the whole pool is appended to the output. The
pool is re-shuffled at every level, including levels that add nothing.

A track played ``p`` times therefore appears ``max_count - p + 1`` times, so
the least-played tracks dominate the playlist while every matched track
still shows up at least once.

For example, with a maximum play count of 3 the output is:
- a shuffled block of the tracks played 0 times
- a shuffled block of the tracks played 0 or 1 times
- a shuffled block of the tracks played 0, 1 or 2 times
- a shuffled block of every track
"""

from collections.abc import Iterable, Iterator, MutableSequence
import random
from typing import TypeVar

from toolz import groupby

from underplayed.config import get_logger
from underplayed.domain.entities import MatchedTrack

logger = get_logger(__name__)

T = TypeVar("T")


def fisher_yates_shuffle(
    items: MutableSequence[T],
    rng: random.Random | None = None,
) -> MutableSequence[T]:
    """Shuffle ``items`` in place with a uniform random permutation.

    Walks ``j`` from the last index down to 1, swapping element ``j`` with a
    uniformly chosen element in ``0..j`` inclusive.
    """
    rand = rng or random
    for j in range(len(items) - 1, 0, -1):
        k = rand.randint(0, j)
        items[j], items[k] = items[k], items[j]
    return items


def iter_shuffle_blocks(
    tracks: Iterable[MatchedTrack],
    rng: random.Random | None = None,
) -> Iterator[tuple[int, list[MatchedTrack]]]:
    """Yield ``(level, shuffled_pool)`` for every level with a non-empty pool.

    Grouping and level order are deterministic; only the order inside each
    block depends on ``rng``.
    """
    groups = groupby(lambda matched: matched.play_count, tracks)
    if not groups:
        return

    max_count = max(groups)
    pool: list[MatchedTrack] = []

    for level in range(max_count + 1):
        pool.extend(groups.get(level, ()))
        if pool:
            yield level, list(fisher_yates_shuffle(list(pool), rng))


def cumulative_shuffle(
    tracks: Iterable[MatchedTrack],
    rng: random.Random | None = None,
) -> list[MatchedTrack]:
    """Produce the full cumulative shuffle as one flat sequence.

    Args:
        tracks: Matched tracks in any order
        rng: Optional random source, for reproducible orderings

    Returns:
        Every block from ``iter_shuffle_blocks`` concatenated in level order
    """
    ordered: list[MatchedTrack] = []
    block_count = 0
    for _, block in iter_shuffle_blocks(tracks, rng):
        ordered.extend(block)
        block_count += 1

    logger.debug(
        f"Cumulative shuffle produced {len(ordered)} entries in {block_count} blocks"
    )
    return ordered


def expected_shuffle_length(tracks: Iterable[MatchedTrack]) -> int:
    """Length ``cumulative_shuffle`` will produce for ``tracks``.

    The sum over all tracks of ``max_count - play_count + 1``.
    """
    counts = [matched.play_count for matched in tracks]
    if not counts:
        return 0
    max_count = max(counts)
    return sum(max_count - count + 1 for count in counts)
