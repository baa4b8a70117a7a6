"""
Region scorers for image-derived mine placement.

A scorer looks at one grid region of the photo and returns how
interesting it is. Higher scores mean more mine candidates for that cell.
"""
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from .imaging import ImageSource


# ============================================================================
# Constants
# ============================================================================

# ITU-R BT.601 luma weights
LUMA_WEIGHTS = np.array([0.299, 0.587, 0.114])

PINECONE_MIN_AREA = 3
PINECONE_CHECK_RADIUS = 4
FALLBACK_SCORE = 0.1


@dataclass(frozen=True)
class RegionBounds:
    """Pixel rectangle [start, end) covered by one grid cell."""

    start_x: int
    start_y: int
    end_x: int
    end_y: int

    @property
    def is_empty(self) -> bool:
        return self.end_x <= self.start_x or self.end_y <= self.start_y


@dataclass(frozen=True)
class RegionScore:
    """
    Result of scoring one region.

    Attributes:
        score: Non-negative interest score.
        x: Pixel column of the most interesting sample.
        y: Pixel row of the most interesting sample.
    """

    score: float
    x: int
    y: int


def region_bounds(
    size: int, image: ImageSource, column_index: int, row_index: int
) -> RegionBounds:
    """Split the image into a size x size grid and return one cell's pixels."""
    return RegionBounds(
        start_x=(column_index * image.width) // size,
        start_y=(row_index * image.height) // size,
        end_x=min(((column_index + 1) * image.width) // size, image.width),
        end_y=min(((row_index + 1) * image.height) // size, image.height),
    )


def scan_step(size: int, image: ImageSource) -> int:
    """Sampling stride: about ten samples across the shorter cell side."""
    cell_width = image.width // size
    cell_height = image.height // size
    return max(1, min(cell_width, cell_height) // 10)


def _random_point(
    bounds: RegionBounds, image: ImageSource, rng: np.random.Generator
) -> Tuple[int, int]:
    """Random pixel inside the region, or its clamped corner if it is empty."""
    if bounds.is_empty:
        return min(bounds.start_x, image.width - 1), min(bounds.start_y, image.height - 1)
    x = int(rng.integers(bounds.start_x, bounds.end_x))
    y = int(rng.integers(bounds.start_y, bounds.end_y))
    return x, y


# ============================================================================
# Scorer Interface
# ============================================================================

class RegionScorer(ABC):
    """
    Abstract base class for region scorers.

    Scorers must be deterministic for the same pixel data, apart from
    the position reported by a fallback pick.
    """

    def initialize(self) -> None:
        """Prepare any expensive state. Called once by the generator."""

    @abstractmethod
    def score(
        self,
        image: ImageSource,
        bounds: RegionBounds,
        step: int,
        rng: np.random.Generator,
    ) -> RegionScore:
        """
        Score one region of the image.

        Args:
            image: Decoded image.
            bounds: Pixel rectangle of the region.
            step: Sampling stride in pixels.
            rng: Random source for fallback picks.

        Returns:
            Score and the sample position it came from.
        """


# ============================================================================
# Luminance Scorer
# ============================================================================

class LuminanceScorer(RegionScorer):
    """Darker regions score higher. Score is 1 - mean luma / 255."""

    def score(
        self,
        image: ImageSource,
        bounds: RegionBounds,
        step: int,
        rng: np.random.Generator,
    ) -> RegionScore:
        if bounds.is_empty:
            x, y = _random_point(bounds, image, rng)
            return RegionScore(FALLBACK_SCORE, x, y)

        samples = _region_rgb(image, bounds)[::step, ::step]
        luma = samples @ LUMA_WEIGHTS
        darkest = np.unravel_index(int(np.argmin(luma)), luma.shape)
        return RegionScore(
            score=float(1.0 - luma.mean() / 255.0),
            x=bounds.start_x + int(darkest[1]) * step,
            y=bounds.start_y + int(darkest[0]) * step,
        )


# ============================================================================
# Pinecone Scorer
# ============================================================================

class PineconeScorer(RegionScorer):
    """
    Looks for brown, textured, mid-dark patches.

    A sample qualifies when it is brownish, either in the brown hue band
    or contrasty, and has moderate saturation and lightness. Its area is
    estimated by counting similar pixels around it. The region's score is
    the best qualifying sample, or FALLBACK_SCORE at a random pixel when
    nothing qualifies.
    """

    def __init__(
        self,
        min_area: int = PINECONE_MIN_AREA,
        check_radius: int = PINECONE_CHECK_RADIUS,
    ) -> None:
        self.min_area = min_area
        self.check_radius = check_radius

    def score(
        self,
        image: ImageSource,
        bounds: RegionBounds,
        step: int,
        rng: np.random.Generator,
    ) -> RegionScore:
        best: Optional[RegionScore] = None
        if not bounds.is_empty:
            best = self._best_sample(image, bounds, step)
        if best is None:
            x, y = _random_point(bounds, image, rng)
            return RegionScore(FALLBACK_SCORE, x, y)
        return best

    def _best_sample(
        self, image: ImageSource, bounds: RegionBounds, step: int
    ) -> Optional[RegionScore]:
        rgb = _region_rgb(image, bounds)
        samples = rgb[::step, ::step]
        red, green, blue = samples[..., 0], samples[..., 1], samples[..., 2]

        brownish = (red > blue * 1.2) & (green > blue * 1.1) & (red > 60)
        hue, saturation, lightness = _hsl(samples)
        in_brown_range = (hue >= 15) & (hue <= 45)
        contrast = (
            np.abs(red - green) + np.abs(green - blue) + np.abs(blue - red)
        )
        good_contrast = contrast > 30
        candidates = (
            brownish
            & (in_brown_range | good_contrast)
            & (saturation > 0.1) & (saturation < 0.9)
            & (lightness > 0.1) & (lightness < 0.6)
        )

        best: Optional[RegionScore] = None
        for sample_row, sample_col in np.argwhere(candidates):
            local_x = int(sample_col) * step
            local_y = int(sample_row) * step
            area = self._area_size(rgb, local_x, local_y)
            if area < self.min_area:
                continue

            color_score = 2.0 if in_brown_range[sample_row, sample_col] else 1.0
            contrast_score = 1.5 if good_contrast[sample_row, sample_col] else 1.0
            size_score = min(5.0, math.log2(area + 1))
            y = bounds.start_y + local_y
            position_factor = 1.0 + (y / image.height) * 0.3
            score = color_score * contrast_score * size_score * position_factor

            # Strictly greater keeps the first sample on ties.
            if best is None or score > best.score:
                best = RegionScore(score, bounds.start_x + local_x, y)
        return best

    def _area_size(self, rgb: np.ndarray, x: int, y: int) -> int:
        """Count pixels near (x, y) with a similar brownish color.

        Coordinates are relative to the region array, so the window never
        reaches outside the region.
        """
        red, green, _ = (int(channel) for channel in rgb[y, x])
        window = rgb[
            max(y - self.check_radius, 0):y + self.check_radius + 1,
            max(x - self.check_radius, 0):x + self.check_radius + 1,
        ]
        check_red, check_green, check_blue = (
            window[..., 0], window[..., 1], window[..., 2]
        )
        similar = (
            (np.abs(check_red - red) < 50)
            & (np.abs(check_green - green) < 50)
            & (check_blue < np.maximum(check_red, check_green) * 0.8)
            & ((check_red > check_blue) | (check_green > check_blue))
        )
        return int(similar.sum())


def _region_rgb(image: ImageSource, bounds: RegionBounds) -> np.ndarray:
    return image.region_rgb(
        bounds.start_x, bounds.start_y, bounds.end_x, bounds.end_y
    )


def _hsl(rgb: np.ndarray) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Approximate hue in degrees, saturation and lightness in [0, 1]."""
    red, green, blue = (rgb[..., channel].astype(np.float64) for channel in range(3))
    maximum = np.maximum(np.maximum(red, green), blue)
    minimum = np.minimum(np.minimum(red, green), blue)
    delta = maximum - minimum

    lightness = (maximum + minimum) / 510.0
    with np.errstate(divide="ignore", invalid="ignore"):
        saturation = np.where(
            delta == 0, 0.0, delta / (1.0 - np.abs(2.0 * lightness - 1.0)) / 255.0
        )
        safe_delta = np.where(delta == 0, 1.0, delta)
        hue = np.where(
            maximum == red,
            np.mod((green - blue) / safe_delta, 6.0),
            np.where(
                maximum == green,
                (blue - red) / safe_delta + 2.0,
                (red - green) / safe_delta + 4.0,
            ),
        )
    hue = np.where(delta == 0, 0.0, np.floor(hue * 60.0 + 0.5))
    hue = np.where(hue < 0, hue + 360.0, hue)
    return hue, saturation, lightness
