"""Tests for the interactive front end, without the key loop."""

import random

import pytest
from rich.panel import Panel

import loopgrid_play
from grid_parser import parse_grid_glyphs
from loopgrid import GenerationError, full_board_mismatches
from loopgrid_play import InteractiveDemo, parse_args
from loopgrid_types import Direction, Position
from size_policy import DensityLevel


@pytest.fixture
def session():
    demo = InteractiveDemo(rng=random.Random(3), viewport=(800, 400))
    demo.worker.start()
    yield demo
    demo.worker.stop(timeout=5)


class TestInteractiveDemo:
    """Tests for cursor, rotation and regeneration handling."""

    def test_initial_board_fits_viewport(self, session: InteractiveDemo) -> None:
        grid = session.worker.grid
        assert 2 <= grid.rows <= 10
        assert 2 <= grid.cols <= 17
        assert session.worker.open_connections == full_board_mismatches(grid)

    def test_cursor_stops_at_edge(self, session: InteractiveDemo) -> None:
        session.move_cursor(Direction.N)
        assert session.cursor == Position(0, 0)
        assert session.status_message == "Edge of board"

        session.move_cursor(Direction.E)
        assert session.cursor == Position(1, 0)

    def test_rotate_cursor(self, session: InteractiveDemo) -> None:
        tile = session.worker.grid.tile_at(Position(0, 0))
        before = tile.rotation_count
        session.rotate_cursor()
        assert tile.rotation_count == before + 1
        assert session.worker.wait_idle(timeout=5) == full_board_mismatches(session.worker.grid)

    def test_regenerate_resets_cursor(self, session: InteractiveDemo) -> None:
        session.move_cursor(Direction.E)
        old_grid = session.worker.grid
        session.regenerate()
        assert session.worker.grid is not old_grid
        assert session.cursor == Position(0, 0)
        assert session.status_message == "New puzzle"

    def test_cycle_density(self, session: InteractiveDemo) -> None:
        session.cycle_density()
        assert session.density == DensityLevel.DENSE
        session.cycle_density()
        assert session.density == DensityLevel.SCROLLING
        assert (session.worker.grid.rows, session.worker.grid.cols) == (6, 10)
        session.cycle_density()
        assert session.density == DensityLevel.NORMAL

    def test_failed_regeneration_keeps_session(
        self, session: InteractiveDemo, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """A GenerationError leaves board, cursor and theme alone and stays visible."""

        def fail(rows, cols, *args, **kwargs):
            raise GenerationError("no board", rows, cols, 1)

        session.move_cursor(Direction.E)
        grid, theme, request = session.worker.grid, session.theme, session.request
        monkeypatch.setattr(loopgrid_play, "generate", fail)

        session.cycle_density()

        assert session.status_message == "✗ no board"
        assert session.status_line() == "✗ no board"
        assert session.density == DensityLevel.NORMAL
        assert session.cursor == Position(1, 0)
        assert session.theme is theme
        assert session.request is request
        assert session.worker.grid is grid

    def test_solved_status_follows_board(self, session: InteractiveDemo) -> None:
        """The win message disappears as soon as a tap breaks the loop again."""
        loop = parse_grid_glyphs("┌┐|└┘")
        session.worker.replace_board(loop, full_board_mismatches(loop))
        session.cursor = Position(0, 0)
        assert session.status_line().startswith("✓ Solved")

        session.rotate_cursor()
        session.worker.wait_idle(timeout=5)
        assert not session.worker.solved
        assert session.status_line() == session.status_message
        assert "Solved" not in session.status_line()

        for _ in range(3):
            session.rotate_cursor()
        session.worker.wait_idle(timeout=5)
        assert session.status_line().startswith("✓ Solved")

    def test_display_is_panel(self, session: InteractiveDemo) -> None:
        assert isinstance(session.generate_display(), Panel)


class TestParseArgs:
    """Tests for the command line."""

    def test_defaults(self) -> None:
        args = parse_args([])
        assert args.density == "normal"
        assert (args.rows, args.cols) == (6, 10)
        assert args.seed is None

    def test_scrolling_size(self) -> None:
        args = parse_args(["--density", "scrolling", "--rows", "12", "--cols", "30", "--seed", "4"])
        assert DensityLevel(args.density) == DensityLevel.SCROLLING
        assert (args.rows, args.cols, args.seed) == (12, 30, 4)

    def test_rejects_unknown_density(self) -> None:
        with pytest.raises(SystemExit):
            parse_args(["--density", "huge"])
