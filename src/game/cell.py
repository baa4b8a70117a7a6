"""
Cell module for the pinecone minesweeper.

Represents individual cells on the game board with their state
(hidden/revealed/flagged) and whether a mine was placed on them.
"""
from enum import Enum, auto
from dataclasses import dataclass
from typing import Optional


# ============================================================================
# Constants
# ============================================================================

class CellState(Enum):
    """Possible visual states of a cell."""

    HIDDEN = auto()
    REVEALED = auto()
    FLAGGED = auto()


class RevealCause(Enum):
    """How a revealed cell came to be revealed."""

    MANUAL = auto()
    AUTO = auto()


# ============================================================================
# Cell Data Class
# ============================================================================

@dataclass
class Cell:
    """
    Represents a single cell in the grid.

    Attributes:
        mine_included: Whether this cell holds a mine. Fixed at creation.
        state: Current visual state (hidden, revealed, or flagged).
        revealed_by: Set together with REVEALED, None otherwise.
    """

    mine_included: bool = False
    state: CellState = CellState.HIDDEN
    revealed_by: Optional[RevealCause] = None

    def reveal(self, cause: RevealCause = RevealCause.MANUAL) -> bool:
        """
        Reveal this cell.

        Returns:
            True if cell was revealed, False if already revealed or flagged.
        """
        if self.state != CellState.HIDDEN:
            return False
        self.state = CellState.REVEALED
        self.revealed_by = cause
        return True

    def toggle_flag(self) -> bool:
        """
        Toggle flag on this cell.

        Returns:
            True if flag was toggled, False if cell is revealed.
        """
        if self.state == CellState.REVEALED:
            return False
        if self.state == CellState.HIDDEN:
            self.state = CellState.FLAGGED
        else:
            self.state = CellState.HIDDEN
        return True

    @property
    def is_hidden(self) -> bool:
        """Check if cell is hidden."""
        return self.state == CellState.HIDDEN

    @property
    def is_revealed(self) -> bool:
        """Check if cell is revealed."""
        return self.state == CellState.REVEALED

    @property
    def is_flagged(self) -> bool:
        """Check if cell is flagged."""
        return self.state == CellState.FLAGGED
