"""
Minesweeper game module.

Provides the board engine, configuration, and the game controller.
"""
from .cell import Cell, CellState, RevealCause
from .board import Board, CellView, CellViewKind, GameStatus
from .config import (
    DEFAULT_MINE_RATIO,
    MINE_RATIO_STEP,
    Difficulty,
    GameConfig,
    compute_mine_count,
    snap_mine_ratio,
)
from .errors import ConfigurationError, InvariantError, MinesweeperError
from .shuffle import to_shuffled
from .controller import GameController
from .clock import run_clock
from .environment import SweeperEnv, render_ansi

__all__ = [
    "Cell",
    "CellState",
    "RevealCause",
    "Board",
    "CellView",
    "CellViewKind",
    "GameStatus",
    "DEFAULT_MINE_RATIO",
    "MINE_RATIO_STEP",
    "Difficulty",
    "GameConfig",
    "compute_mine_count",
    "snap_mine_ratio",
    "ConfigurationError",
    "InvariantError",
    "MinesweeperError",
    "to_shuffled",
    "GameController",
    "run_clock",
    "SweeperEnv",
    "render_ansi",
]
