"""
Mine candidate detection module.

Turns an optional photo into a weighted pool of board positions.
"""
from .imaging import ImageSource, load_image
from .scoring import (
    LuminanceScorer,
    PineconeScorer,
    RegionBounds,
    RegionScore,
    RegionScorer,
    region_bounds,
)
from .candidates import CandidateGenerator, MineCandidate, expand_pool

__all__ = [
    "ImageSource",
    "load_image",
    "RegionScorer",
    "LuminanceScorer",
    "PineconeScorer",
    "RegionBounds",
    "RegionScore",
    "region_bounds",
    "CandidateGenerator",
    "MineCandidate",
    "expand_pool",
]
