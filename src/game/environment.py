"""
Gymnasium environment wrapper for the pinecone minesweeper.

Exposes the controller's reveal and flag intents as a discrete action
space so scripted or learning players can drive a game.
"""
from typing import Any, Dict, Optional, SupportsFloat, Tuple

import gymnasium as gym
import numpy as np
from gymnasium import spaces

from detection.candidates import CandidateGenerator
from detection.imaging import ImageSource

from .board import CellViewKind
from .config import GameConfig
from .controller import GameController


# ============================================================================
# Constants
# ============================================================================

_ANSI_SYMBOLS = {
    CellViewKind.HIDDEN: ".",
    CellViewKind.FLAGGED: "F",
    CellViewKind.WRONG_FLAG: "x",
    CellViewKind.MINE: "*",
    CellViewKind.EXPLODED: "#",
}


# ============================================================================
# Minesweeper Environment
# ============================================================================

class SweeperEnv(gym.Env):
    """
    Gymnasium environment around a GameController.

    Observation:
        2D int8 array where:
        - -1 = hidden cell
        - -2 = flagged cell
        - 0-8 = revealed cell with adjacent mine count
        - 9 = revealed mine

    Actions:
        Discrete action space of size 2 * size * size.
        Action i < size * size reveals cell (i // size, i % size).
        Action i >= size * size toggles the flag on cell i - size * size.

    Rewards:
        - +1 for revealing a safe cell
        - +10 for completing the board
        - -10 for revealing a mine
        - 0 for toggling a flag
        - -0.1 for an action that changed nothing
    """

    metadata = {"render_modes": ["human", "ansi"], "render_fps": 4}

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        generator: Optional[CandidateGenerator] = None,
        image: Optional[ImageSource] = None,
        render_mode: Optional[str] = None,
    ) -> None:
        """
        Initialize the environment.

        Args:
            config: Difficulty and mine ratio (default: Easy).
            generator: Candidate generator passed to the controller.
            image: Photo used for mine placement, if any.
            render_mode: How to render the environment.
        """
        super().__init__()

        self.controller = GameController(generator=generator, config=config)
        if image is not None:
            self.controller.set_image(image)
        self.render_mode = render_mode

        size = self.controller.size
        self._cell_count = size * size

        self.observation_space = spaces.Box(
            low=-2, high=9, shape=(size, size), dtype=np.int8,
        )
        self.action_space = spaces.Discrete(2 * self._cell_count)

        self._steps = 0

    def reset(
        self,
        *,
        seed: Optional[int] = None,
        options: Optional[Dict[str, Any]] = None,
    ) -> Tuple[np.ndarray, Dict[str, Any]]:
        """
        Deal a new board for a new episode.

        Args:
            seed: Random seed for the mine shuffle.
            options: Additional options (unused).

        Returns:
            Tuple of (observation, info dict).
        """
        super().reset(seed=seed)
        if seed is not None:
            self.controller.rng = np.random.default_rng(seed)
        self.controller.reset()
        self._steps = 0
        return self.controller.board.get_observation(), self._get_info()

    def step(
        self, action: int
    ) -> Tuple[np.ndarray, SupportsFloat, bool, bool, Dict[str, Any]]:
        """
        Execute one action.

        Args:
            action: Encoded reveal or flag action.

        Returns:
            Tuple of (observation, reward, terminated, truncated, info).
        """
        flag, row, col = self._decode_action(int(action))
        self._steps += 1

        if flag:
            changed = self.controller.on_cell_flag_toggled(row, col)
            reward = 0.0 if changed else -0.1
        else:
            reward = self._reveal_reward(row, col)

        observation = self.controller.board.get_observation()
        terminated = not self.controller.board.is_playing
        return observation, reward, terminated, False, self._get_info()

    def _decode_action(self, action: int) -> Tuple[bool, int, int]:
        """Split an action into (is_flag, row, col)."""
        if not 0 <= action < 2 * self._cell_count:
            raise ValueError(f"Action {action} is outside the action space")
        flag = action >= self._cell_count
        index = action - self._cell_count if flag else action
        size = self.controller.size
        return flag, index // size, index % size

    def _reveal_reward(self, row: int, col: int) -> float:
        if not self.controller.on_cell_activated(row, col):
            return -0.1
        board = self.controller.board
        if board.cell(row, col).mine_included:
            return -10.0
        if not board.is_playing:
            return 10.0
        return 1.0

    def _get_info(self) -> Dict[str, Any]:
        """Get info dictionary for current state."""
        return {
            "steps": self._steps,
            "status": self.controller.status.name,
            "mine_count": self.controller.mine_count,
            "flag_count": self.controller.flag_count,
            "progress": self.controller.progress,
            "elapsed_seconds": self.controller.elapsed_seconds,
        }

    def render(self) -> Optional[str]:
        """Render the current board state."""
        if self.render_mode == "ansi":
            return render_ansi(self.controller)
        if self.render_mode == "human":
            print(render_ansi(self.controller))
        return None

    def get_action_mask(self) -> np.ndarray:
        """
        Get mask of actions that would change the board.

        Returns:
            Boolean array where True = valid action.
        """
        mask = np.zeros(self.action_space.n, dtype=bool)
        if not self.controller.board.is_playing:
            return mask
        size = self.controller.size
        for row, col in self.controller.board.get_valid_actions():
            mask[row * size + col] = True
        for row in range(size):
            for col in range(size):
                if not self.controller.board.cell(row, col).is_revealed:
                    mask[self._cell_count + row * size + col] = True
        return mask


def render_ansi(controller: GameController) -> str:
    """Render the board as text using the read-only cell views."""
    lines = []
    for row in range(controller.size):
        symbols = []
        for col in range(controller.size):
            view = controller.cell_view(row, col)
            if view.kind == CellViewKind.NUMBER:
                symbols.append(str(view.adjacent_mines) if view.adjacent_mines else " ")
            else:
                symbols.append(_ANSI_SYMBOLS[view.kind])
        lines.append(" ".join(symbols))
    return "\n".join(lines)
