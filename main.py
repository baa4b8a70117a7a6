#!/usr/bin/env python3
"""
Pinecone minesweeper - terminal front end.

Usage:
    python main.py play [--difficulty {easy,normal,hard}] [--ratio R] [--image PATH]
    python main.py heatmap --image PATH [--difficulty ...] [--scorer ...]
"""
import argparse
import logging
import sys
import time
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent / "src"))

from detection import CandidateGenerator, LuminanceScorer, PineconeScorer, load_image
from game import (
    Difficulty,
    GameConfig,
    GameController,
    GameStatus,
    MinesweeperError,
    render_ansi,
    snap_mine_ratio,
)

SCORERS = {
    "pinecone": PineconeScorer,
    "luminance": LuminanceScorer,
}

HELP_TEXT = (
    "Commands: r ROW COL (reveal), f ROW COL (flag), n (new game), "
    "d easy|normal|hard (difficulty), q (quit)"
)


def build_controller(args: argparse.Namespace) -> GameController:
    """Create a controller from command line options."""
    generator = CandidateGenerator(scorer=SCORERS[args.scorer]())
    generator.initialize()
    config = GameConfig(
        difficulty=Difficulty[args.difficulty.upper()],
        mine_ratio=snap_mine_ratio(args.ratio),
    )
    controller = GameController(generator=generator, config=config, seed=args.seed)
    if args.image:
        controller.set_image(load_image(args.image))
    return controller


def print_status(controller: GameController) -> None:
    print(
        f"Mines left: {controller.mines_left:03d} | "
        f"Time: {controller.elapsed_seconds:03d} | "
        f"Progress: {controller.progress:.0%} | "
        f"{controller.status.name}"
    )
    print(render_ansi(controller))


def play(args: argparse.Namespace) -> None:
    """Play interactively in the terminal."""
    controller = build_controller(args)
    print(HELP_TEXT)
    print_status(controller)

    last_tick = time.monotonic()
    while True:
        try:
            line = input("> ").strip().lower()
        except EOFError:
            break

        # Count the whole seconds spent waiting for input.
        now = time.monotonic()
        for _ in range(int(now - last_tick)):
            controller.tick()
        last_tick += int(now - last_tick)

        parts = line.split()
        if not parts:
            continue
        command = parts[0]
        try:
            if command == "q":
                break
            elif command == "n":
                controller.reset()
            elif command == "d" and len(parts) == 2:
                controller.set_difficulty(Difficulty[parts[1].upper()])
            elif command in ("r", "f") and len(parts) == 3:
                row, col = int(parts[1]), int(parts[2])
                if not (0 <= row < controller.size and 0 <= col < controller.size):
                    print(f"Cell must be within 0..{controller.size - 1}")
                    continue
                if command == "r":
                    controller.on_cell_activated(row, col)
                else:
                    controller.on_cell_flag_toggled(row, col)
            else:
                print(HELP_TEXT)
                continue
        except (KeyError, ValueError, MinesweeperError) as error:
            print(f"Invalid command: {error}")
            continue

        print_status(controller)
        if controller.status == GameStatus.COMPLETED:
            print("\n*** CLEARED! ***")
        elif controller.status == GameStatus.GAME_OVER:
            print("\n*** GAME OVER ***")


def heatmap(args: argparse.Namespace) -> None:
    """Print how many pool entries each cell gets from a photo."""
    generator = CandidateGenerator(scorer=SCORERS[args.scorer](), seed=args.seed)
    generator.initialize()
    size = Difficulty[args.difficulty.upper()].size
    image = load_image(args.image)
    candidates = generator.generate(size, size * size, image)

    print(f"Image: {image.width}x{image.height}, board: {size}x{size}")
    weights = {candidate.position: candidate.weight for candidate in candidates}
    for row in range(size):
        print(" ".join(f"{weights[(col, row)]:>2}" for col in range(size)))
    print(f"Pool size: {sum(weights.values())}")


def main() -> None:
    """Parse arguments and run the appropriate command."""
    parser = argparse.ArgumentParser(
        description="Pinecone minesweeper - mines placed from your photo"
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    def add_common(sub: argparse.ArgumentParser) -> None:
        sub.add_argument(
            "--difficulty",
            choices=["easy", "normal", "hard"],
            default="easy",
            help="Board size preset",
        )
        sub.add_argument(
            "--scorer",
            choices=sorted(SCORERS),
            default="pinecone",
            help="Image heuristic for mine placement",
        )
        sub.add_argument("--seed", type=int, default=None, help="Random seed")

    # Play command
    play_parser = subparsers.add_parser("play", help="Play in the terminal")
    add_common(play_parser)
    play_parser.add_argument(
        "--ratio", type=float, default=5 / 32, help="Mine ratio, snapped to 1/32"
    )
    play_parser.add_argument("--image", type=str, default=None, help="Photo to use")

    # Heatmap command
    heatmap_parser = subparsers.add_parser(
        "heatmap", help="Show mine candidate weights for a photo"
    )
    add_common(heatmap_parser)
    heatmap_parser.add_argument("--image", type=str, required=True, help="Photo to use")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="[%(asctime)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    if args.command == "play":
        play(args)
    elif args.command == "heatmap":
        heatmap(args)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
