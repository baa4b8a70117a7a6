"""
Mine candidate generation.

Produces the weighted pool of board positions that mines are drawn
from: uniform when there is no photo, weighted by a region scorer
when there is one.
"""
import logging
import math
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

import numpy as np

from .imaging import ImageSource
from .scoring import PineconeScorer, RegionScorer, region_bounds, scan_step

logger = logging.getLogger(__name__)


# ============================================================================
# Constants
# ============================================================================

BASE_ENTRIES = 25
MIN_ENTRIES = 1
MAX_ENTRIES = 30
FLAT_NORMALIZED_SCORE = 0.1


@dataclass(frozen=True)
class MineCandidate:
    """
    One weighted position in the candidate pool.

    Attributes:
        column_index: Board column.
        row_index: Board row.
        weight: Number of pool entries this position gets.
        x: Pixel column the score came from (None without an image).
        y: Pixel row the score came from (None without an image).
    """

    column_index: int
    row_index: int
    weight: int = 1
    x: Optional[int] = None
    y: Optional[int] = None

    @property
    def position(self) -> Tuple[int, int]:
        """(column, row) pair as used by Board placements."""
        return self.column_index, self.row_index


def expand_pool(candidates: Iterable[MineCandidate]) -> List[Tuple[int, int]]:
    """Repeat each candidate's position weight times."""
    pool: List[Tuple[int, int]] = []
    for candidate in candidates:
        pool.extend([candidate.position] * candidate.weight)
    return pool


def entries_for_score(normalized_score: float) -> int:
    """Pool entries for a score normalized to [0, 1]."""
    return max(MIN_ENTRIES, min(MAX_ENTRIES, math.floor(normalized_score * BASE_ENTRIES)))


# ============================================================================
# Candidate Generator
# ============================================================================

class CandidateGenerator:
    """
    Builds mine candidate pools.

    The generator must be initialized before it uses images. Until then,
    and whenever no image is given, it returns the uniform pool so that a
    reset never waits on image processing.

    Scored pools are cached for the most recent image and board size, so
    repeated resets on the same photo only shuffle.
    """

    def __init__(
        self,
        scorer: Optional[RegionScorer] = None,
        seed: Optional[int] = None,
    ) -> None:
        """
        Initialize the generator.

        Args:
            scorer: Region scorer for photos (default: PineconeScorer).
            seed: Random seed for fallback picks.
        """
        self.scorer = scorer if scorer is not None else PineconeScorer()
        self.rng = np.random.default_rng(seed)
        self._ready = False
        self._cached: Optional[Tuple[ImageSource, int, List[MineCandidate]]] = None

    def initialize(self) -> None:
        """Prepare the scorer. Safe to call more than once."""
        if self._ready:
            return
        self.scorer.initialize()
        self._ready = True
        logger.debug("Candidate generator ready with %s", type(self.scorer).__name__)

    @property
    def ready(self) -> bool:
        return self._ready

    def generate(
        self,
        size: int,
        requested_count: int,
        image: Optional[ImageSource] = None,
    ) -> List[MineCandidate]:
        """
        Produce weighted candidates for a size x size board.

        Every board position appears at least once, so any cell can
        become a mine. The pool is never trimmed to requested_count; the
        caller shuffles and walks it.

        Args:
            size: Side length of the board.
            requested_count: Number of draws the caller intends to make.
            image: Decoded photo, or None for uniform placement.

        Returns:
            One candidate per board position.
        """
        if image is None:
            return self._uniform(size)
        if not self._ready:
            logger.debug("Generator not initialized, using uniform candidates")
            return self._uniform(size)

        candidates = self._cached_image_based(size, image)
        pool_size = sum(candidate.weight for candidate in candidates)
        logger.debug(
            "Image pool: %d entries over %d cells for %d requested draws",
            pool_size, len(candidates), requested_count,
        )
        return candidates

    def _uniform(self, size: int) -> List[MineCandidate]:
        return [
            MineCandidate(column_index, row_index)
            for row_index in range(size)
            for column_index in range(size)
        ]

    def _cached_image_based(
        self, size: int, image: ImageSource
    ) -> List[MineCandidate]:
        cached = self._cached
        if cached is not None and cached[0] is image and cached[1] == size:
            return list(cached[2])
        candidates = self._image_based(size, image)
        self._cached = (image, size, candidates)
        return list(candidates)

    def _image_based(self, size: int, image: ImageSource) -> List[MineCandidate]:
        step = scan_step(size, image)
        scored = []
        for row_index in range(size):
            for column_index in range(size):
                bounds = region_bounds(size, image, column_index, row_index)
                scored.append(
                    (column_index, row_index,
                     self.scorer.score(image, bounds, step, self.rng))
                )

        scores = np.array([region.score for _, _, region in scored])
        min_score, max_score = float(scores.min()), float(scores.max())
        score_range = max_score - min_score

        candidates = []
        for column_index, row_index, region in scored:
            if score_range > 0:
                normalized = (region.score - min_score) / score_range
            else:
                normalized = FLAT_NORMALIZED_SCORE
            candidates.append(
                MineCandidate(
                    column_index=column_index,
                    row_index=row_index,
                    weight=entries_for_score(normalized),
                    x=region.x,
                    y=region.y,
                )
            )
        return candidates
