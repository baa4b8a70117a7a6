"""
Pytest configuration and shared fixtures.
"""
import pytest
import sys
from pathlib import Path

import numpy as np

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from detection import CandidateGenerator, ImageSource, LuminanceScorer
from game import Board, Cell, Difficulty, GameConfig, GameController


# ============================================================================
# Mine Layouts
# ============================================================================

# (column, row) pairs: a wall down column 4 plus two mines on the right.
WALL_MINES = frozenset({(4, row) for row in range(8)} | {(6, 2), (7, 5)})

# Everything left of the wall, as (row, col) pairs.
WALL_LEFT_REGION = frozenset((row, col) for row in range(8) for col in range(4))


# ============================================================================
# Board Fixtures
# ============================================================================

@pytest.fixture
def wall_left_region() -> frozenset:
    """Cells left of the wall in WALL_MINES, as (row, col) pairs."""
    return WALL_LEFT_REGION


@pytest.fixture
def wall_board() -> Board:
    """8x8 board with 10 mines at fixed positions."""
    return Board.initialize(8, WALL_MINES)


@pytest.fixture
def small_board() -> Board:
    """3x3 board with a single mine in the bottom-right corner."""
    return Board.initialize(3, {(2, 2)})


@pytest.fixture
def empty_board() -> Board:
    """5x5 board with no mines for cascade testing."""
    return Board.initialize(5, ())


# ============================================================================
# Cell Fixtures
# ============================================================================

@pytest.fixture
def hidden_cell() -> Cell:
    """Create a hidden cell."""
    return Cell()


@pytest.fixture
def mine_cell() -> Cell:
    """Create a cell containing a mine."""
    return Cell(mine_included=True)


# ============================================================================
# Controller Fixtures
# ============================================================================

@pytest.fixture
def easy_config() -> GameConfig:
    """Easy board with 10 mines."""
    return GameConfig(Difficulty.EASY, 5 / 32)


@pytest.fixture
def controller(easy_config: GameConfig) -> GameController:
    """Seeded controller on an easy board."""
    return GameController(config=easy_config, seed=1234)


# ============================================================================
# Image Fixtures
# ============================================================================

@pytest.fixture
def white_image() -> ImageSource:
    """Plain white 64x64 image."""
    return ImageSource(np.full((64, 64, 4), 255, dtype=np.uint8))


@pytest.fixture
def dark_corner_image() -> ImageSource:
    """White 64x64 image with a black top-left 8x8 block."""
    pixels = np.full((64, 64, 4), 255, dtype=np.uint8)
    pixels[:8, :8, :3] = 0
    return ImageSource(pixels)


@pytest.fixture
def brown_patch_image() -> ImageSource:
    """White 64x64 image with a pinecone-brown block in cell (col 5, row 2)."""
    pixels = np.full((64, 64, 4), 255, dtype=np.uint8)
    pixels[16:24, 40:48, :3] = (140, 90, 40)
    return ImageSource(pixels)


@pytest.fixture
def luminance_generator() -> CandidateGenerator:
    """Initialized generator using the luminance heuristic."""
    generator = CandidateGenerator(scorer=LuminanceScorer(), seed=7)
    generator.initialize()
    return generator
