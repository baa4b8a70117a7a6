"""
Game controller.

Owns the current board, turns configuration into fresh boards, and keeps
the elapsed-time clock. Every mutation happens in response to an explicit
intent; the read accessors never change state.
"""
import asyncio
import itertools
import logging
from typing import Awaitable, List, Optional, Set, Tuple

import numpy as np

from detection.candidates import CandidateGenerator, expand_pool
from detection.imaging import ImageSource

from .board import Board, CellView, GameStatus
from .config import Difficulty, GameConfig
from .shuffle import to_shuffled

logger = logging.getLogger(__name__)

# Candidates requested per mine, giving the weighting room to matter.
OVERSAMPLING = 2


# ============================================================================
# Game Controller
# ============================================================================

class GameController:
    """
    Drives one game at a time.

    Resets are numbered. A board built for an older request is dropped
    if a newer one has already been installed, so a slow async reset can
    never overwrite a fresher board.
    """

    def __init__(
        self,
        generator: Optional[CandidateGenerator] = None,
        config: Optional[GameConfig] = None,
        seed: Optional[int] = None,
    ) -> None:
        """
        Initialize the controller and deal the first board.

        Args:
            generator: Candidate source. A default generator is created and
                initialized here; an injected one keeps its own lifecycle.
            config: Difficulty and mine ratio (default: Easy).
            seed: Random seed for the mine shuffle.
        """
        if generator is None:
            generator = CandidateGenerator()
            generator.initialize()
        self.generator = generator
        self.config = config if config is not None else GameConfig()
        self.rng = np.random.default_rng(seed)

        self._image: Optional[ImageSource] = None
        self._reset_requests = itertools.count(1)
        self._installed_request = 0
        self._image_requests = itertools.count(1)
        self._latest_image_request = 0

        self._board = Board.initialize(self.config.size, ())
        self._elapsed_seconds = 0
        self._clock_stopped = False
        self.reset()

    # ========================================================================
    # Configuration
    # ========================================================================

    def configure(
        self,
        difficulty: Optional[Difficulty] = None,
        mine_ratio: Optional[float] = None,
    ) -> None:
        """
        Change the configuration for the next reset.

        Raises:
            ConfigurationError: If the new values are invalid. The previous
                configuration is kept in that case.
        """
        self.config = GameConfig(
            difficulty=difficulty if difficulty is not None else self.config.difficulty,
            mine_ratio=mine_ratio if mine_ratio is not None else self.config.mine_ratio,
        )

    def set_difficulty(self, difficulty: Difficulty) -> None:
        """Change difficulty and deal a new board."""
        self.configure(difficulty=difficulty)
        self.reset()

    def set_mine_ratio(self, mine_ratio: float) -> None:
        """Change the mine ratio. Takes effect on the next reset."""
        self.configure(mine_ratio=mine_ratio)

    def set_image(self, image: Optional[ImageSource]) -> None:
        """Use a new photo (or none) and deal a new board."""
        self._latest_image_request = next(self._image_requests)
        self._image = image
        self.reset()

    async def set_image_async(
        self, pending: Awaitable[Optional[ImageSource]]
    ) -> bool:
        """
        Wait for an image decode, then use it.

        Boards dealt while the decode is pending keep using the previous
        image. If another image is selected before this one resolves,
        this result is discarded. A decode that fails gives the latest
        selection back to the request it superseded.

        Returns:
            True if the image was applied.
        """
        previous = self._latest_image_request
        request = next(self._image_requests)
        self._latest_image_request = request
        try:
            image = await pending
        except Exception:
            if self._latest_image_request == request:
                self._latest_image_request = previous
            raise
        if request != self._latest_image_request:
            logger.debug("Discarding superseded image request %d", request)
            return False
        self._image = image
        self.reset()
        return True

    @property
    def image(self) -> Optional[ImageSource]:
        return self._image

    # ========================================================================
    # Reset
    # ========================================================================

    def reset(self) -> None:
        """Deal a new board from the current configuration and image."""
        request = next(self._reset_requests)
        config = self.config
        placements = self._draw_placements(config, self._image, self.rng)
        self._install(request, config, placements)

    async def reset_async(self) -> bool:
        """
        Deal a new board, generating candidates off the event loop.

        Returns:
            True if the board was installed, False if a newer reset won.
        """
        request = next(self._reset_requests)
        config = self.config
        image = self._image
        rng = np.random.default_rng(int(self.rng.integers(2**62)))
        placements = await asyncio.to_thread(
            self._draw_placements, config, image, rng
        )
        return self._install(request, config, placements)

    def _draw_placements(
        self,
        config: GameConfig,
        image: Optional[ImageSource],
        rng: np.random.Generator,
    ) -> Set[Tuple[int, int]]:
        """Shuffle the candidate pool and take the first distinct positions."""
        size = config.size
        mine_count = config.mine_count
        candidates = self.generator.generate(size, OVERSAMPLING * mine_count, image)
        pool = to_shuffled(expand_pool(candidates), rng)

        placements: Set[Tuple[int, int]] = set()
        for position in pool:
            if len(placements) == mine_count:
                break
            placements.add(position)

        if len(placements) < mine_count:
            logger.debug(
                "Candidate pool covered %d of %d mines, drawing the rest uniformly",
                len(placements), mine_count,
            )
            remaining: List[Tuple[int, int]] = [
                (col, row)
                for row in range(size)
                for col in range(size)
                if (col, row) not in placements
            ]
            for position in to_shuffled(remaining, rng):
                if len(placements) == mine_count:
                    break
                placements.add(position)
        return placements

    def _install(
        self,
        request: int,
        config: GameConfig,
        placements: Set[Tuple[int, int]],
    ) -> bool:
        if request < self._installed_request:
            logger.debug(
                "Discarding stale board %d, board %d is already in play",
                request, self._installed_request,
            )
            return False
        self._installed_request = request
        self._board = Board.initialize(config.size, placements)
        self._elapsed_seconds = 0
        self._clock_stopped = False
        logger.debug(
            "Dealt %dx%d board with %d mines (request %d)",
            config.size, config.size, len(placements), request,
        )
        return True

    # ========================================================================
    # Player Intents
    # ========================================================================

    def on_cell_activated(self, row: int, col: int) -> bool:
        """Reveal a cell. Returns True if the board changed."""
        before = self._board.status
        changed = self._board.reveal(row, col)
        self._after_move(before)
        return changed

    def on_cell_flag_toggled(self, row: int, col: int) -> bool:
        """Flag or unflag a cell. Returns True if the board changed."""
        before = self._board.status
        changed = self._board.toggle_flag(row, col)
        self._after_move(before)
        return changed

    def _after_move(self, before: GameStatus) -> None:
        after = self._board.status
        if before == GameStatus.PLAYING and after != GameStatus.PLAYING:
            self._clock_stopped = True
            logger.debug("Game ended with %s after %ds", after.name, self._elapsed_seconds)

    def tick(self) -> bool:
        """
        Advance the clock by one second.

        Only counts while the game is playing and at least one cell has
        been revealed or flagged. Once the game ends the clock stays
        stopped until the next reset.

        Returns:
            True if a second was counted.
        """
        if self._clock_stopped:
            return False
        if self._board.status != GameStatus.PLAYING:
            self._clock_stopped = True
            return False
        if self._board.progress == 0:
            return False
        self._elapsed_seconds += 1
        return True

    # ========================================================================
    # Read Accessors
    # ========================================================================

    @property
    def board(self) -> Board:
        return self._board

    @property
    def status(self) -> GameStatus:
        return self._board.status

    @property
    def size(self) -> int:
        return self._board.size

    @property
    def mine_count(self) -> int:
        return self._board.mine_count

    @property
    def flag_count(self) -> int:
        return self._board.flag_count

    @property
    def mines_left(self) -> int:
        """Mines minus flags. Negative when the player over-flags."""
        return self.mine_count - self.flag_count

    @property
    def progress(self) -> float:
        return self._board.progress

    @property
    def elapsed_seconds(self) -> int:
        return self._elapsed_seconds

    @property
    def clock_running(self) -> bool:
        """Whether the next tick would count."""
        return (
            not self._clock_stopped
            and self._board.status == GameStatus.PLAYING
            and self._board.progress > 0
        )

    def cell_view(self, row: int, col: int) -> CellView:
        return self._board.cell_view(row, col)
