"""
Interactive loop puzzle for the terminal.
Move a cursor over the board and rotate tiles until every connector is matched.
"""

from __future__ import annotations

import argparse
import logging
import random

import readchar
from rich.console import Console
from rich.live import Live
from rich.panel import Panel
from rich.text import Text

from ascii_render import Theme, random_theme, render_grid
from loopgrid import GenerationError, generate
from rotation_worker import RotationWorker
from size_policy import (
    MIN_TILE_DENSE,
    DensityLevel,
    PuzzleRequest,
    choose_puzzle_request,
    max_grid_dimensions,
)
from loopgrid_types import BoardState, Direction, OpenConnections, Position

logger = logging.getLogger(__name__)

# Terminal cells taken by the panel border, key help and status line
RESERVED_ROWS = 16
RESERVED_COLS = 4


class InteractiveDemo:
    """Interactive loop puzzle session."""

    def __init__(
        self,
        density: DensityLevel = DensityLevel.NORMAL,
        rng: random.Random | None = None,
        custom_rows: int = 6,
        custom_cols: int = 10,
        viewport: tuple[float, float] | None = None,
    ) -> None:
        self.density = density
        self.rng = rng or random.Random()
        self.custom_rows = custom_rows
        self.custom_cols = custom_cols
        self.console = Console()
        self.viewport = viewport or self._terminal_viewport()
        self.status_message = "Ready"
        self.cursor = Position(0, 0)
        self.theme: Theme = random_theme(self.rng)
        self.request: PuzzleRequest | None = None
        self.live: Live | None = None

        grid, open_connections = self._new_board()
        self.worker = RotationWorker(grid, open_connections, on_publish=self._on_publish)

    def _terminal_viewport(self) -> tuple[float, float]:
        """Viewport in tile units: one dense tile per 3x1 block of terminal cells."""
        width, height = self.console.size
        return (
            max(0, (width - RESERVED_COLS) // 3) * MIN_TILE_DENSE,
            max(0, height - RESERVED_ROWS) * MIN_TILE_DENSE,
        )

    def _new_board(self) -> BoardState:
        avail_w, avail_h = self.viewport
        max_rows, max_cols = max_grid_dimensions(avail_w, avail_h, self.density == DensityLevel.DENSE)
        request = choose_puzzle_request(
            self.density, max_rows, max_cols, self.rng, self.custom_rows, self.custom_cols
        )
        board = generate(
            request.rows,
            request.cols,
            request.mirror_horizontal,
            request.mirror_vertical,
            rng=self.rng,
        )
        # Only commit session state once generation has succeeded
        self.request = request
        self.theme = random_theme(self.rng)
        self.cursor = Position(0, 0)
        return board

    def _on_publish(self, open_connections: OpenConnections) -> None:
        if self.live is not None:
            self.live.update(self.generate_display())

    def status_line(self) -> str:
        """Status shown under the board; the win message tracks the live board."""
        if self.worker.solved:
            return "✓ Solved! Press any key for a new puzzle"
        return self.status_message

    def generate_display(self) -> Panel:
        """Generate the current display with board and status."""
        grid = self.worker.grid
        open_connections = self.worker.open_connections

        status = Text()
        if self.request is not None:
            mirror = [
                name
                for name, flag in (("horizontal", self.request.mirror_horizontal), ("vertical", self.request.mirror_vertical))
                if flag
            ]
            status.append("Board: ", style="bold")
            status.append(f"{grid.rows}x{grid.cols} ({self.density.value}")
            status.append(f", mirrored {' + '.join(mirror)})\n" if mirror else ")\n")
        status.append("Open connections: ", style="bold")
        status.append(f"{len(open_connections)}\n\n")

        board_text = render_grid(grid, open_connections, highlight_pos=self.cursor, theme=self.theme)
        status.append(Text.from_ansi(board_text))
        status.append("\n\n")
        status.append("Keys:\n", style="bold cyan")
        status.append("  Arrows / WASD - Move cursor\n")
        status.append("  Space / Enter - Rotate tile\n")
        status.append("  N - New puzzle\n")
        status.append("  M - Cycle density\n")
        status.append("  Q - Quit\n\n")

        status.append("─" * 40 + "\n", style="dim")
        status.append("Status: ", style="bold")
        status.append(self.status_line())

        return Panel(status, title="Loop Grid", border_style=self.theme.name if self.theme.name != "grey" else "white")

    def move_cursor(self, direction: Direction) -> None:
        target = self.cursor.moved(direction)
        if self.worker.grid.in_bounds(target):
            self.cursor = target
            self.status_message = f"Cursor at ({target.col}, {target.row})"
        else:
            self.status_message = "Edge of board"

    def rotate_cursor(self) -> None:
        if self.worker.tap(self.cursor):
            tile = self.worker.grid.tile_at(self.cursor)
            self.status_message = (
                f"Rotated {tile.archetype.value} at ({self.cursor.col}, {self.cursor.row}) "
                f"to {tile.orientation.value}"
            )

    def regenerate(self) -> bool:
        """Swap in a new puzzle; on failure the current board stays and False is returned."""
        try:
            grid, open_connections = self._new_board()
        except GenerationError as e:
            logger.warning("generation failed: %s", e)
            self.status_message = f"✗ {e}"
            return False
        self.worker.replace_board(grid, open_connections)
        self.status_message = "New puzzle"
        return True

    def cycle_density(self) -> None:
        levels = list(DensityLevel)
        previous = self.density
        self.density = levels[(levels.index(previous) + 1) % len(levels)]
        if self.regenerate():
            self.status_message = f"Density: {self.density.value}"
        else:
            self.density = previous

    def run(self) -> None:
        """Run the interactive session."""
        self.worker.start()
        with Live(self.generate_display(), console=self.console, refresh_per_second=4) as live:
            self.live = live
            try:
                while True:
                    live.update(self.generate_display())

                    key = readchar.readkey()

                    if self.worker.solved and key.lower() != "q":
                        self.regenerate()
                        continue

                    if key.lower() == "q":
                        self.status_message = "Quitting..."
                        live.update(self.generate_display())
                        break
                    elif key == readchar.key.UP or key.lower() == "w":
                        self.move_cursor(Direction.N)
                    elif key == readchar.key.DOWN or key.lower() == "s":
                        self.move_cursor(Direction.S)
                    elif key == readchar.key.LEFT or key.lower() == "a":
                        self.move_cursor(Direction.W)
                    elif key == readchar.key.RIGHT or key.lower() == "d":
                        self.move_cursor(Direction.E)
                    elif key in (" ", readchar.key.ENTER, "\n"):
                        self.rotate_cursor()
                    elif key.lower() == "n":
                        self.regenerate()
                    elif key.lower() == "m":
                        self.cycle_density()
                    else:
                        self.status_message = f"Unknown key: {repr(key)}"

            except KeyboardInterrupt:
                self.status_message = "Interrupted by user"
                live.update(self.generate_display())
            finally:
                self.live = None
                self.worker.stop()


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Play a loop tile puzzle in the terminal.")
    parser.add_argument(
        "--density",
        choices=[level.value for level in DensityLevel],
        default=DensityLevel.NORMAL.value,
        help="Tile packing; 'scrolling' uses --rows/--cols",
    )
    parser.add_argument("--rows", type=int, default=6, help="Rows for the scrolling density")
    parser.add_argument("--cols", type=int, default=10, help="Columns for the scrolling density")
    parser.add_argument("--seed", type=int, default=None, help="Seed for reproducible puzzles")
    parser.add_argument("--width", type=float, default=None, help="Viewport width override")
    parser.add_argument("--height", type=float, default=None, help="Viewport height override")
    parser.add_argument("--log-level", default="WARNING", help="Logging level (e.g. INFO, DEBUG)")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(level=args.log_level.upper(), format="%(levelname)s: %(message)s")

    viewport = None
    if args.width is not None and args.height is not None:
        viewport = (args.width, args.height)

    demo = InteractiveDemo(
        density=DensityLevel(args.density),
        rng=random.Random(args.seed),
        custom_rows=args.rows,
        custom_cols=args.cols,
        viewport=viewport,
    )
    demo.run()


if __name__ == "__main__":
    main()
