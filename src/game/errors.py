"""
Error types raised by the game engine.

Out-of-range coordinates are programming errors and surface as the
built-in IndexError instead of a dedicated type.
"""


class MinesweeperError(Exception):
    """Base class for all game engine errors."""


class ConfigurationError(MinesweeperError, ValueError):
    """Invalid difficulty, mine ratio, or mine placement."""


class InvariantError(MinesweeperError, RuntimeError):
    """A state machine reached a value it does not know how to handle."""
