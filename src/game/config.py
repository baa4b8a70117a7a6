"""
Game configuration: difficulty presets and mine ratio.
"""
import math
from dataclasses import dataclass
from enum import Enum

from .errors import ConfigurationError


# ============================================================================
# Constants
# ============================================================================

MINE_RATIO_STEP = 1 / 32
DEFAULT_MINE_RATIO = 5 / 32


class Difficulty(Enum):
    """Board size presets. The value is the side length of the board."""

    EASY = 8
    NORMAL = 12
    HARD = 16

    @property
    def size(self) -> int:
        """Side length of the square board."""
        return self.value


def compute_mine_count(size: int, mine_ratio: float) -> int:
    """
    Number of mines for a size x size board.

    Rounds half up and keeps at least one safe cell.

    Args:
        size: Side length of the board.
        mine_ratio: Fraction of cells holding a mine, within [0, 1].

    Returns:
        Mine count between 0 and size**2 - 1.
    """
    if size < 1:
        raise ConfigurationError("Board size must be positive")
    if not 0.0 <= mine_ratio <= 1.0:
        raise ConfigurationError(f"Mine ratio must be within [0, 1], got {mine_ratio}")
    total_cells = size * size
    requested = math.floor(total_cells * mine_ratio + 0.5)
    return min(requested, total_cells - 1)


def snap_mine_ratio(mine_ratio: float) -> float:
    """Round a ratio to the nearest multiple of MINE_RATIO_STEP."""
    steps = math.floor(mine_ratio / MINE_RATIO_STEP + 0.5)
    return min(max(steps, 0), 32) * MINE_RATIO_STEP


# ============================================================================
# Game Configuration
# ============================================================================

@dataclass
class GameConfig:
    """
    Configuration for the next game.

    Attributes:
        difficulty: Board size preset.
        mine_ratio: Fraction of cells holding a mine.
    """

    difficulty: Difficulty = Difficulty.EASY
    mine_ratio: float = DEFAULT_MINE_RATIO

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        self._validate()

    def _validate(self) -> None:
        """Ensure configuration values are valid."""
        if not isinstance(self.difficulty, Difficulty):
            raise ConfigurationError(f"Unknown difficulty: {self.difficulty!r}")
        if not 0.0 <= self.mine_ratio <= 1.0:
            raise ConfigurationError(
                f"Mine ratio must be within [0, 1], got {self.mine_ratio}"
            )

    @property
    def size(self) -> int:
        """Side length of the board for this configuration."""
        return self.difficulty.size

    @property
    def mine_count(self) -> int:
        """Mines placed on the next reset."""
        return compute_mine_count(self.size, self.mine_ratio)
