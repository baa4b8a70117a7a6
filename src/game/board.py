"""
Board module for the pinecone minesweeper.

Implements the square game board: mine layout, cell revealing with
flood fill, flag toggling, and the derived game status.
"""
from collections import deque
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Deque, FrozenSet, Iterable, Iterator, List, Optional, Tuple

import numpy as np

from .cell import Cell, CellState, RevealCause
from .errors import ConfigurationError, InvariantError


# ============================================================================
# Constants
# ============================================================================

class GameStatus(Enum):
    """Derived state of the game. Never stored."""

    PLAYING = auto()
    GAME_OVER = auto()
    COMPLETED = auto()


class CellViewKind(Enum):
    """What the presentation layer should draw for a cell."""

    HIDDEN = auto()
    FLAGGED = auto()
    WRONG_FLAG = auto()
    NUMBER = auto()
    MINE = auto()
    EXPLODED = auto()


@dataclass(frozen=True)
class CellView:
    """
    Read-only description of a cell for rendering.

    Attributes:
        kind: What to draw.
        adjacent_mines: Neighbor mine count, only meaningful for NUMBER.
    """

    kind: CellViewKind
    adjacent_mines: int = 0


# ============================================================================
# Board Class
# ============================================================================

@dataclass(eq=False)
class Board:
    """
    Square minesweeper board.

    Mines are fixed when the board is created. Every later operation only
    changes cell states. Placements are given as (column, row) pairs.
    """

    size: int
    placements: FrozenSet[Tuple[int, int]] = frozenset()
    _grid: List[List[Cell]] = field(default_factory=list, init=False, repr=False)
    _adjacent: np.ndarray = field(
        default_factory=lambda: np.zeros((0, 0), dtype=np.int8),
        init=False,
        repr=False,
    )

    def __post_init__(self) -> None:
        """Build the grid after dataclass creation."""
        self.placements = frozenset(self.placements)
        self._validate()
        self._init_grid()
        self._calculate_adjacent_mines()

    @classmethod
    def initialize(
        cls, size: int, placements: Iterable[Tuple[int, int]]
    ) -> "Board":
        """
        Create a board with every cell hidden.

        Args:
            size: Side length of the board.
            placements: (column, row) positions holding a mine.

        Returns:
            Fresh board.
        """
        return cls(size, frozenset(placements))

    # ========================================================================
    # Grid Initialization (Low-level)
    # ========================================================================

    def _validate(self) -> None:
        if self.size < 1:
            raise ConfigurationError("Board size must be positive")
        for col, row in self.placements:
            if not self._is_valid_position(row, col):
                raise ConfigurationError(
                    f"Mine placement ({col}, {row}) is outside a "
                    f"{self.size}x{self.size} board"
                )

    def _init_grid(self) -> None:
        """Create the grid of cells with mines in place."""
        self._grid = [
            [Cell(mine_included=(col, row) in self.placements)
             for col in range(self.size)]
            for row in range(self.size)
        ]

    def _calculate_adjacent_mines(self) -> None:
        """Count mines in the 8-neighborhood of every cell."""
        mines = np.zeros((self.size, self.size), dtype=np.int8)
        for col, row in self.placements:
            mines[row, col] = 1
        padded = np.pad(mines, 1)
        counts = np.zeros_like(mines)
        for delta_row in (-1, 0, 1):
            for delta_col in (-1, 0, 1):
                if delta_row == 0 and delta_col == 0:
                    continue
                counts += padded[
                    1 + delta_row:1 + delta_row + self.size,
                    1 + delta_col:1 + delta_col + self.size,
                ]
        self._adjacent = counts

    # ========================================================================
    # Neighbor Utilities (Low-level)
    # ========================================================================

    def _get_neighbors(self, row: int, col: int) -> List[Tuple[int, int]]:
        """Valid (row, col) positions around a cell, clipped at the edges."""
        neighbors = []
        for delta_row in (-1, 0, 1):
            for delta_col in (-1, 0, 1):
                if delta_row == 0 and delta_col == 0:
                    continue
                new_row = row + delta_row
                new_col = col + delta_col
                if self._is_valid_position(new_row, new_col):
                    neighbors.append((new_row, new_col))
        return neighbors

    def _is_valid_position(self, row: int, col: int) -> bool:
        """Check if position is within board bounds."""
        return 0 <= row < self.size and 0 <= col < self.size

    def _require_position(self, row: int, col: int) -> None:
        if not self._is_valid_position(row, col):
            raise IndexError(
                f"Cell ({row}, {col}) is outside a {self.size}x{self.size} board"
            )

    # ========================================================================
    # Game Actions (Mid-level)
    # ========================================================================

    def reveal(self, row: int, col: int) -> bool:
        """
        Reveal a hidden cell.

        A safe cell with no adjacent mines starts a flood fill that
        reveals the connected empty region and its numbered border.
        Flagged cells are never revealed, directly or by the flood fill.

        Args:
            row: Row index to reveal.
            col: Column index to reveal.

        Returns:
            True if any cell changed, False if the move was ignored.

        Raises:
            IndexError: If the position is outside the board.
        """
        self._require_position(row, col)
        if self.status != GameStatus.PLAYING:
            return False

        cell = self._grid[row][col]
        if not cell.reveal(RevealCause.MANUAL):
            return False

        if not cell.mine_included:
            self._flood_fill(row, col)
        return True

    def _flood_fill(self, row: int, col: int) -> None:
        """Auto-reveal outward from an already revealed safe cell."""
        queue: Deque[Tuple[int, int]] = deque([(row, col)])
        while queue:
            current_row, current_col = queue.popleft()
            if self._adjacent[current_row, current_col] != 0:
                continue
            for neighbor_row, neighbor_col in self._get_neighbors(
                current_row, current_col
            ):
                neighbor = self._grid[neighbor_row][neighbor_col]
                # Cell.reveal refuses flagged and already revealed cells,
                # which also keeps each cell out of the queue after its first visit.
                if neighbor.reveal(RevealCause.AUTO):
                    queue.append((neighbor_row, neighbor_col))

    def toggle_flag(self, row: int, col: int) -> bool:
        """
        Toggle flag on a cell.

        Args:
            row: Row index.
            col: Column index.

        Returns:
            True if flag was toggled, False otherwise.

        Raises:
            IndexError: If the position is outside the board.
        """
        self._require_position(row, col)
        if self.status != GameStatus.PLAYING:
            return False
        return self._grid[row][col].toggle_flag()

    def adjacent_mine_count(self, row: int, col: int) -> int:
        """Count mines among the up to 8 neighbors of a cell."""
        self._require_position(row, col)
        return int(self._adjacent[row, col])

    # ========================================================================
    # State Accessors (High-level)
    # ========================================================================

    @property
    def status(self) -> GameStatus:
        """Derive the game status from the cells."""
        completed = True
        for cell in self.cells():
            if cell.state == CellState.REVEALED:
                if cell.mine_included:
                    return GameStatus.GAME_OVER
            elif cell.state in (CellState.HIDDEN, CellState.FLAGGED):
                if not cell.mine_included:
                    completed = False
            else:
                raise InvariantError(f"Unknown cell state: {cell.state!r}")
        return GameStatus.COMPLETED if completed else GameStatus.PLAYING

    @property
    def is_playing(self) -> bool:
        """Check if game is still in progress."""
        return self.status == GameStatus.PLAYING

    @property
    def total_cells(self) -> int:
        return self.size * self.size

    @property
    def mine_count(self) -> int:
        return len(self.placements)

    def count_state(self, state: CellState) -> int:
        """Number of cells currently in the given state."""
        return sum(1 for cell in self.cells() if cell.state == state)

    @property
    def flag_count(self) -> int:
        return self.count_state(CellState.FLAGGED)

    @property
    def revealed_count(self) -> int:
        return self.count_state(CellState.REVEALED)

    @property
    def progress(self) -> float:
        """Fraction of cells that are revealed or flagged."""
        touched = self.total_cells - self.count_state(CellState.HIDDEN)
        return touched / self.total_cells

    def cells(self) -> Iterator[Cell]:
        """Iterate over all cells in row-major order."""
        for row in self._grid:
            yield from row

    def cell(self, row: int, col: int) -> Cell:
        """Get cell at position. Raises IndexError when out of range."""
        self._require_position(row, col)
        return self._grid[row][col]

    def get_cell(self, row: int, col: int) -> Optional[Cell]:
        """Get cell at position, or None if invalid."""
        if not self._is_valid_position(row, col):
            return None
        return self._grid[row][col]

    def cell_view(self, row: int, col: int) -> CellView:
        """
        Describe what to draw for a cell.

        Pure query: hidden mines and wrong flags are exposed once the
        game has ended without changing any cell state.
        """
        cell = self.cell(row, col)
        finished = self.status != GameStatus.PLAYING

        if cell.state == CellState.HIDDEN:
            if finished and cell.mine_included:
                return CellView(CellViewKind.MINE)
            return CellView(CellViewKind.HIDDEN)
        if cell.state == CellState.FLAGGED:
            if finished and not cell.mine_included:
                return CellView(CellViewKind.WRONG_FLAG)
            return CellView(CellViewKind.FLAGGED)
        if cell.state == CellState.REVEALED:
            if cell.mine_included:
                return CellView(CellViewKind.EXPLODED)
            return CellView(CellViewKind.NUMBER, int(self._adjacent[row, col]))
        raise InvariantError(f"Unknown cell state: {cell.state!r}")

    def get_observation(self) -> np.ndarray:
        """
        Get board state as numpy array.

        Returns:
            2D int8 array where:
                -1 = hidden
                -2 = flagged
                0-8 = revealed with adjacent count
                9 = revealed mine
        """
        obs = np.full((self.size, self.size), -1, dtype=np.int8)
        for row in range(self.size):
            for col in range(self.size):
                cell = self._grid[row][col]
                if cell.is_flagged:
                    obs[row, col] = -2
                elif cell.is_revealed:
                    obs[row, col] = 9 if cell.mine_included else self._adjacent[row, col]
        return obs

    def get_valid_actions(self) -> List[Tuple[int, int]]:
        """List of (row, col) positions that can still be revealed."""
        return [
            (row, col)
            for row in range(self.size)
            for col in range(self.size)
            if self._grid[row][col].is_hidden
        ]
