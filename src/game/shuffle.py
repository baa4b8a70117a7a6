"""
Unbiased shuffling of candidate pools.
"""
from typing import List, Optional, Sequence, TypeVar

import numpy as np

T = TypeVar("T")


def to_shuffled(
    items: Sequence[T],
    rng: Optional[np.random.Generator] = None,
) -> List[T]:
    """
    Return a uniformly shuffled copy of items.

    Runs Fisher-Yates over a copy, so the input is left untouched.

    Args:
        items: Sequence to shuffle.
        rng: Random source (default: a fresh unseeded generator).

    Returns:
        New list with the same multiset of elements.
    """
    rng = rng if rng is not None else np.random.default_rng()
    shuffled = list(items)
    for source in range(len(shuffled) - 1, 0, -1):
        target = int(rng.integers(0, source + 1))
        shuffled[source], shuffled[target] = shuffled[target], shuffled[source]
    return shuffled
