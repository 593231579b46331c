"""
Demonstration script for the loop tile engine.
"""

from __future__ import annotations

import argparse
import logging
import random

from ascii_render import random_theme, render_grid, render_open_connections
from grid_parser import format_glyphs, parse_grid_glyphs
from loopgrid import (
    full_board_mismatches,
    generate,
    generate_grid,
    mirror_grid,
    rotate_at,
    shuffle_grid,
)
from loopgrid_types import Position


def demo(seed: int | None = None) -> None:
    """Walk through generation, mirroring, shuffling and a few rotations."""
    rng = random.Random(seed)
    theme = random_theme(rng)

    print("Example 1: Solved reference board (5x9)")
    print("-" * 40)
    solved = generate_grid(5, 9, rng)
    print(render_grid(solved, full_board_mismatches(solved), theme=theme))
    print()

    print("Example 2: Mirrored on both axes (6x10)")
    print("-" * 40)
    base = generate_grid(6, 10, rng, symmetric_cols=True, symmetric_rows=True)
    mirrored = mirror_grid(base, mirror_horizontal=True, mirror_vertical=True)
    print(render_grid(mirrored, full_board_mismatches(mirrored), theme=theme))
    print()

    print("Example 3: Shuffled into a puzzle")
    print("-" * 40)
    grid, open_connections = shuffle_grid(mirrored, rng)
    print(render_grid(grid, open_connections, theme=theme))
    print(f"{len(open_connections)} open connections")
    print()

    print("Example 4: Hand-drawn board with a misplaced corner")
    print("-" * 40)
    drawn = parse_grid_glyphs("┌─┐|└─┌")
    drawn_open = full_board_mismatches(drawn)
    print(render_grid(drawn, drawn_open, theme=theme))
    print(render_open_connections(drawn_open))
    print()

    print("Example 5: Rotating the stray corner twice closes the loop")
    print("-" * 40)
    for _ in range(2):
        drawn, drawn_open = rotate_at(Position(2, 1), drawn, drawn_open)
    print(render_grid(drawn, drawn_open, theme=theme))
    print(f"{format_glyphs(drawn)} -> {len(drawn_open)} open connections")
    print()

    print("Example 6: Full pipeline")
    print("-" * 40)
    grid, open_connections = generate(4, 8, mirror_horizontal=True, rng=rng)
    print(render_grid(grid, open_connections, theme=theme))


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Loop tile engine demo")
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("-v", "--verbose", action="store_true", help="Log generation details")
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
    )
    demo(args.seed)


if __name__ == "__main__":
    main()
