"""
Once-per-second clock driver for the game controller.
"""
import asyncio

from .controller import GameController


async def run_clock(controller: GameController, interval: float = 1.0) -> None:
    """
    Tick the controller every interval seconds until cancelled.

    The controller decides whether a tick counts, so ticks that land
    after the game has ended are ignored rather than raced.
    """
    while True:
        await asyncio.sleep(interval)
        controller.tick()
